"""Workflow controller: the LIST -> EDIT -> PREVIEW state machine.

The controller exclusively owns the ``SessionState`` (draft, edit target,
listing, connection flags, notice). The UI forwards user events to the
methods below and re-renders from ``controller.state`` afterwards; nothing
here depends on Textual, so every transition can be driven directly.

Transitions:

    LIST    --create_new / select_existing-->  EDIT
    EDIT    --analyze (success)------------->  PREVIEW
    EDIT    --open_preview------------------>  PREVIEW
    EDIT    --back------------------------->  LIST
    PREVIEW --save (success)---------------->  LIST
    PREVIEW --back------------------------->  EDIT

Failures never change the view; they leave a notice instead.
"""

from typing import Callable, Optional

import structlog

from promptprinter.llm.client import ModelBackend
from promptprinter.models.config import AIBackend
from promptprinter.models.prompt_record import PromptRecord
from promptprinter.models.session import (
    Notice,
    SessionState,
    ViewingAnalysis,
    ViewingDraft,
    ViewMode,
)
from promptprinter.services import revision
from promptprinter.services.exceptions import (
    AnalysisFailed,
    ConnectivityError,
    PersistenceFailed,
    PromptPrinterError,
    ValidationError,
)
from promptprinter.services.storage import PromptStore
from promptprinter.services.templates import Template, append_template

logger = structlog.get_logger()


BackendFactory = Callable[[AIBackend], ModelBackend]


class WorkflowController:
    """Drives the prompt revision workflow over one SessionState."""

    def __init__(
        self,
        backend: ModelBackend,
        store: PromptStore,
        backend_kind: AIBackend = AIBackend.GEMINI,
        backend_factory: Optional[BackendFactory] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
        state: Optional[SessionState] = None,
    ):
        """
        Initialize the controller.

        Args:
            backend: Active AI backend
            store: Storage collaborator
            backend_kind: Which variant ``backend`` is
            backend_factory: Builds a backend for the in-app switcher (optional)
            on_notice: Called with every new notice (the UI shows it as a toast)
            state: Initial session state (a fresh one is created if omitted)
        """
        self.backend = backend
        self.store = store
        self.backend_factory = backend_factory
        self.on_notice = on_notice
        self.state = state or SessionState()
        self.state.backend = backend_kind

    # Notices

    def _notify(self, message: str, level: str) -> None:
        notice = Notice(message=message, level=level)
        self.state.notice = notice
        if self.on_notice is not None:
            self.on_notice(notice)

    def _notify_error(self, error: PromptPrinterError) -> None:
        self._notify(error.message, "error")

    def current_notice(self, now: Optional[float] = None) -> Optional[Notice]:
        """Return the live notice, clearing it once it has expired."""
        notice = self.state.notice
        if notice is not None and notice.is_expired(now):
            self.state.notice = None
            return None
        return notice

    # Session bookkeeping

    def _discard_pending_analysis(self) -> None:
        """Any analysis still in flight will be discarded when it resolves."""
        self.state.generation += 1
        self.state.analyzing = False

    def _abandon_session(self) -> None:
        """Mark the current editing session as left behind."""
        self._discard_pending_analysis()

    def _in_view(self, view: ViewMode, operation: str) -> bool:
        if self.state.view == view:
            return True
        logger.warning(
            "operation_refused_wrong_view",
            operation=operation,
            view=self.state.view.value,
            required_view=view.value,
        )
        return False

    def _set_view(self, view: ViewMode) -> None:
        if self.state.view != view:
            logger.info("view_transition", from_view=self.state.view.value, to_view=view.value)
        self.state.view = view

    # Connections

    async def check_connections(self) -> list[ConnectivityError]:
        """Probe storage and the AI backend, updating the status flags.

        Returns:
            One ConnectivityError per failed probe (empty when both succeed)
        """
        failures: list[ConnectivityError] = []

        self.state.db_connected = await self.store.test_connection()
        if not self.state.db_connected:
            failures.append(ConnectivityError("storage"))

        self.state.ai_connected = await self.backend.check_availability()
        if not self.state.ai_connected:
            failures.append(ConnectivityError("ai", f"{self.state.backend.value} backend is not available"))

        for failure in failures:
            logger.warning("connectivity_degraded", component=failure.component, error=failure.message)

        logger.info(
            "connections_checked",
            db_connected=self.state.db_connected,
            ai_connected=self.state.ai_connected,
            backend=self.state.backend.value,
        )
        return failures

    async def select_backend(self, kind: AIBackend) -> bool:
        """Switch the active AI backend and re-probe it.

        Returns:
            True if the backend was switched
        """
        if self.backend_factory is None:
            logger.warning("backend_switch_unsupported", requested=kind.value)
            return False

        try:
            backend = self.backend_factory(kind)
        except ValueError as e:
            self._notify(f"Cannot use {kind.value}: {e}", "error")
            logger.error("backend_switch_failed", requested=kind.value, error=str(e))
            return False

        self.backend = backend
        self.state.backend = kind
        self.state.ai_connected = await self.backend.check_availability()
        logger.info("backend_switched", backend=kind.value, ai_connected=self.state.ai_connected)
        return True

    # LIST

    async def refresh_prompts(self) -> bool:
        """Reload the listing from storage.

        Returns:
            True if the listing was refreshed
        """
        self.state.loading = True
        try:
            self.state.prompts = list(await self.store.get_all_prompts())
            logger.info("prompts_loaded", count=len(self.state.prompts))
            return True
        except PersistenceFailed as e:
            logger.error("prompts_load_failed", error=e.message)
            self._notify("Could not read prompts from storage; check the connection", "error")
            return False
        finally:
            self.state.loading = False

    def set_search_term(self, term: str) -> None:
        self.state.search_term = term or ""

    def filtered_prompts(self) -> list[PromptRecord]:
        """Records whose title contains the search term (case-insensitive)."""
        term = self.state.search_term.lower()
        return [
            p for p in self.state.prompts
            if p is not None and term in (p.title or "").lower()
        ]

    def create_new(self) -> None:
        """Start a fresh draft and open the editor."""
        self._abandon_session()
        self.state.draft = PromptRecord.new_draft()
        self.state.selected_id = None
        self.state.target = ViewingDraft()
        logger.info("user_action_create_new")
        self._set_view(ViewMode.EDIT)

    def select_existing(self, record: PromptRecord) -> None:
        """Copy a stored record into the draft and open the editor."""
        self._abandon_session()
        self.state.draft = record.model_copy(deep=True)
        self.state.selected_id = record.id
        self.state.target = ViewingDraft()
        logger.info("user_action_select_existing", prompt_id=record.id, version=record.version)
        self._set_view(ViewMode.EDIT)

    async def delete_prompt(self, record_id: int) -> bool:
        """Delete a stored record and refresh the listing.

        Returns:
            True if the record was deleted
        """
        try:
            await self.store.delete_prompt(record_id)
        except PersistenceFailed as e:
            logger.error("prompt_delete_failed", prompt_id=record_id, error=e.message)
            self._notify("Delete failed", "error")
            return False

        logger.info("user_action_delete", prompt_id=record_id)
        self._notify("Prompt deleted", "success")
        await self.refresh_prompts()
        return True

    def show_list(self) -> None:
        """Return to the listing from any view."""
        if self.state.view != ViewMode.LIST:
            self._abandon_session()
        self._set_view(ViewMode.LIST)

    # EDIT

    def update_draft(
        self,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        content: Optional[str] = None,
    ) -> None:
        """Apply direct edits to draft fields (None leaves a field unchanged)."""
        draft = self.state.draft
        if title is not None:
            draft.title = title
        if summary is not None:
            draft.summary = summary
        if content is not None:
            draft.content = content

    def insert_template(self, template: Template) -> None:
        """Append a template snippet to the draft content."""
        self.state.draft.content = append_template(self.state.draft.content, template)
        logger.info("template_inserted", template_id=template.id)

    def _require_title_and_content(self) -> None:
        draft = self.state.draft
        if not draft.title or not draft.content:
            raise ValidationError("Please fill in both the title and the content")

    async def analyze(self) -> bool:
        """
        Send the draft's content for AI optimization from the editor.

        Refused (no backend call) outside EDIT, when title or content is
        empty, or while another analysis is running. On success the result
        becomes the live edit target and the view moves to PREVIEW. On
        failure the view and edit target stay as they were.

        Returns:
            True if a result was applied
        """
        if not self._in_view(ViewMode.EDIT, "analyze"):
            return False
        return await self._run_analysis()

    async def _run_analysis(self) -> bool:
        state = self.state

        if state.analyzing:
            logger.info("analysis_already_running")
            return False

        try:
            self._require_title_and_content()
        except ValidationError as e:
            logger.info("analysis_refused", reason=e.message)
            self._notify_error(e)
            return False

        generation = state.generation
        title = state.draft.title
        source_text = state.draft.content

        state.analyzing = True
        logger.info(
            "analysis_started",
            backend=state.backend.value,
            from_view=state.view.value,
            content_length=len(source_text),
        )

        try:
            result = await self.backend.analyze(title, source_text)
        except AnalysisFailed as e:
            if generation != state.generation:
                logger.warning("stale_analysis_discarded", outcome="failure", error=e.message)
                return False
            logger.error("analysis_failed", backend=state.backend.value, error=e.message)
            self._notify_error(e)
            return False
        finally:
            if generation == state.generation:
                state.analyzing = False

        if generation != state.generation:
            logger.warning("stale_analysis_discarded", outcome="success")
            return False

        state.target = ViewingAnalysis(result=result)
        logger.info("analysis_applied", change_count=len(result.change_log))
        self._set_view(ViewMode.PREVIEW)
        return True

    def open_preview(self) -> bool:
        """Open the preview from the editor without analysis (needs non-empty content)."""
        if not self._in_view(ViewMode.EDIT, "open_preview"):
            return False
        if not self.state.draft.content:
            return False
        self._set_view(ViewMode.PREVIEW)
        return True

    def back(self) -> None:
        """PREVIEW -> EDIT, EDIT -> LIST.

        Leaving the preview drops any re-analysis still in flight, so it
        cannot pull the view back to PREVIEW when it resolves.
        """
        if self.state.view == ViewMode.PREVIEW:
            self._discard_pending_analysis()
            self._set_view(ViewMode.EDIT)
        elif self.state.view == ViewMode.EDIT:
            self.show_list()

    # PREVIEW

    @property
    def current_text(self) -> str:
        """The text the preview surface displays and edits."""
        target = self.state.target
        if isinstance(target, ViewingAnalysis):
            return target.result.optimized_prompt
        return self.state.draft.content

    def edit_current_text(self, text: str) -> bool:
        """Route a preview edit to whichever text is live."""
        if not self._in_view(ViewMode.PREVIEW, "edit_current_text"):
            return False
        target = self.state.target
        if isinstance(target, ViewingAnalysis):
            target.result.optimized_prompt = text
        else:
            self.state.draft.content = text
        return True

    def revert(self) -> bool:
        """Drop the analysis result; the draft's content is live again."""
        if not self._in_view(ViewMode.PREVIEW, "revert"):
            return False
        if isinstance(self.state.target, ViewingAnalysis):
            logger.info("user_action_revert")
        self.state.target = ViewingDraft()
        return True

    async def reanalyze(self) -> bool:
        """Analyze again from the preview, using the draft's content."""
        if not self._in_view(ViewMode.PREVIEW, "reanalyze"):
            return False
        return await self._run_analysis()

    async def save(self) -> Optional[PromptRecord]:
        """
        Commit the draft (with the analysis result, if any) from the preview.

        On success the session is reset to a blank draft, the view moves to
        LIST and the listing is refreshed. On failure nothing changes and
        the draft is kept.

        Returns:
            The record storage returned, or None on failure or outside PREVIEW
        """
        if not self._in_view(ViewMode.PREVIEW, "save"):
            return None

        state = self.state

        try:
            saved = await revision.commit(
                self.store,
                state.draft,
                state.analysis,
                state.selected_id,
            )
        except PersistenceFailed as e:
            logger.error("prompt_save_failed", prompt_id=state.selected_id, error=e.message)
            self._notify("Save failed", "error")
            return None

        logger.info("prompt_saved", prompt_id=saved.id, version=saved.version)
        self._notify(f"Saved {saved.version}", "success")
        self._abandon_session()
        state.draft = PromptRecord.new_draft()
        state.selected_id = None
        state.target = ViewingDraft()
        self._set_view(ViewMode.LIST)
        await self.refresh_prompts()
        return saved
