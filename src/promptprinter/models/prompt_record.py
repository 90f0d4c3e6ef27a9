"""PromptRecord model: the persisted, versioned prompt artifact."""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional


INITIAL_VERSION = "v1.0"


class PromptRecord(BaseModel):
    """A stored prompt, or the in-memory draft of one.

    The same shape serves as the editing draft: a draft is a PromptRecord
    whose changes have not been committed yet.
    """

    id: Optional[int] = Field(
        default=None,
        description="Storage-assigned identifier (unset until first save)"
    )

    title: str = Field(
        default="",
        description="Prompt title (required before analysis)"
    )

    summary: str = Field(
        default="",
        description="Short description of the prompt's purpose"
    )

    content: str = Field(
        default="",
        description="Authoritative current prompt text"
    )

    raw_context: str = Field(
        default="",
        description="Draft text as it stood immediately before the last save"
    )

    version: str = Field(
        default=INITIAL_VERSION,
        description="Version tag of the form v<major>.0"
    )

    created_at: Optional[datetime] = Field(
        default=None,
        description="Storage-assigned creation timestamp"
    )

    model_config = {"frozen": False}  # Drafts are edited in place

    @classmethod
    def new_draft(cls) -> "PromptRecord":
        """Return an empty draft with the initial version tag."""
        return cls()

    @property
    def is_persisted(self) -> bool:
        """Whether storage has assigned this record an id."""
        return self.id is not None
