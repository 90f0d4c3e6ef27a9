"""Session state owned by the workflow controller.

All state the editing workflow needs lives in one ``SessionState`` value so
transitions can be exercised without any UI attached.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union

from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.config import AIBackend
from promptprinter.models.prompt_record import PromptRecord


NOTICE_TIMEOUT = 3.0


class ViewMode(str, Enum):
    """Top-level views of the workflow state machine."""

    LIST = "LIST"
    EDIT = "EDIT"
    PREVIEW = "PREVIEW"


@dataclass(frozen=True)
class ViewingDraft:
    """The draft's own content is the live edit target."""


@dataclass
class ViewingAnalysis:
    """The analysis result's optimized text is the live edit target."""

    result: AnalysisResult


EditTarget = Union[ViewingDraft, ViewingAnalysis]


@dataclass
class Notice:
    """Transient user-visible message."""

    message: str
    level: Literal["success", "error"]
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: Optional[float] = None, timeout: float = NOTICE_TIMEOUT) -> bool:
        """Whether the notice has outlived its display interval."""
        if now is None:
            now = time.monotonic()
        return now - self.created_at >= timeout


@dataclass
class SessionState:
    """
    Complete state of one editing session.

    Lifecycle:
    - Created once when the controller starts (LIST view, empty draft)
    - Mutated only by WorkflowController operations
    - Read by the UI to render the current view
    """

    view: ViewMode = ViewMode.LIST

    draft: PromptRecord = field(default_factory=PromptRecord.new_draft)

    selected_id: Optional[int] = None
    """Id of the stored record being edited (None while creating a new prompt)."""

    target: EditTarget = field(default_factory=ViewingDraft)

    prompts: list[PromptRecord] = field(default_factory=list)

    search_term: str = ""

    backend: AIBackend = AIBackend.GEMINI

    ai_connected: bool = False

    db_connected: bool = False

    analyzing: bool = False
    """Set while an analysis call is in flight; blocks a second trigger."""

    loading: bool = False

    generation: int = 0
    """
    Bumped whenever the current editing session is abandoned.

    An analysis that resolves under a different generation than the one it
    started in is discarded instead of applied.
    """

    notice: Optional[Notice] = None

    @property
    def analysis(self) -> Optional[AnalysisResult]:
        """The current analysis result, if the preview is showing one."""
        if isinstance(self.target, ViewingAnalysis):
            return self.target.result
        return None
