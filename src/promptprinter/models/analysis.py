"""AnalysisResult model produced by the model adapter."""

from pydantic import BaseModel, Field


class AnalysisResult(BaseModel):
    """Output of one AI optimization call.

    Backends return camelCase JSON (``optimizedPrompt``, ``changeLog``);
    the aliases map it onto snake_case attributes.
    """

    optimized_prompt: str = Field(
        ...,
        alias="optimizedPrompt",
        description="Full rewritten prompt text"
    )

    change_log: list[str] = Field(
        default_factory=list,
        alias="changeLog",
        description="Ordered human-readable descriptions of each change"
    )

    model_config = {"frozen": False, "populate_by_name": True}
