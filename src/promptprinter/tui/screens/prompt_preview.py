"""PREVIEW screen: review, edit and save the live text."""

from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Label
import structlog

from promptprinter.models.session import EditTarget, Notice, ViewingAnalysis
from promptprinter.models.prompt_record import INITIAL_VERSION
from promptprinter.services.revision import next_version
from promptprinter.tui.screens.base import WorkflowScreen
from promptprinter.tui.widgets.change_log import ChangeLog
from promptprinter.tui.widgets.content_editor import ContentEditor

logger = structlog.get_logger()


class PromptPreviewScreen(WorkflowScreen):
    """Preview of the text a save would persist.

    Shows the optimized text and its change log after an analysis, or the
    draft's own content when there is no analysis result. Edits made here
    go to whichever of the two is live.
    """

    DEFAULT_CSS = """
    #preview-container {
        height: 1fr;
        padding: 0 1;
    }

    #preview-heading {
        height: auto;
        text-style: bold;
    }

    #preview-panels {
        height: 1fr;
    }

    #preview-editor {
        width: 2fr;
        height: 1fr;
    }

    #change-log-panel {
        width: 1fr;
        min-width: 24;
        border-left: solid $accent;
        padding: 0 1;
    }

    #change-log-panel.hidden {
        display: none;
    }

    #status-panel {
        height: 1;
        padding: 0 1;
    }
    """

    AUTO_FOCUS = "#preview-editor"

    BINDINGS = [
        Binding("ctrl+s", "save", "Save version", priority=True),
        Binding("ctrl+r", "revert", "Revert to draft", priority=True),
        Binding("ctrl+g", "reanalyze", "Re-optimize", priority=True),
        Binding("ctrl+b", "copy", "Copy text", priority=True),
        Binding("escape", "back", "Back to editor", priority=True),
    ]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._shown_target: Optional[EditTarget] = None

    def compose(self) -> ComposeResult:
        """Compose the preview layout."""
        with Vertical(id="preview-container"):
            yield Label("", id="preview-heading")
            with Horizontal(id="preview-panels"):
                yield ContentEditor(id="preview-editor")
                with Vertical(id="change-log-panel"):
                    yield Label("Changes")
                    yield ChangeLog()

        yield self.make_status_panel()
        yield Footer()

    def on_mount(self) -> None:
        self._load_target()

    def _load_target(self) -> None:
        """Show the live text for the current edit target."""
        state = self.controller.state
        self._shown_target = state.target

        self.query_one(ContentEditor).load_content(self.controller.current_text)

        panel = self.query_one("#change-log-panel")
        if isinstance(state.target, ViewingAnalysis):
            self.query_one(ChangeLog).show_changes(state.target.result.change_log)
            panel.remove_class("hidden")
            source = "AI-optimized"
        else:
            panel.add_class("hidden")
            source = "Draft"

        if state.selected_id is None:
            saves_as = INITIAL_VERSION
        else:
            saves_as = next_version(state.draft.version)
        self.query_one("#preview-heading", Label).update(
            f"{source}: {state.draft.title or '(untitled)'}  (saves as {saves_as})"
        )

    def render_state(self) -> None:
        """Reload the text when a re-analysis replaced the edit target."""
        if self.controller.state.target is not self._shown_target:
            self._load_target()

    def flush_to_draft(self) -> None:
        """Route the editor's text to whichever text is live."""
        self.controller.edit_current_text(self.query_one(ContentEditor).get_content())

    def action_save(self) -> None:
        self.flush_to_draft()
        logger.info("user_action_save", prompt_id=self.controller.state.selected_id)
        self.app.run_controller_task("prompt_saving", self.controller.save())

    def action_revert(self) -> None:
        self.flush_to_draft()
        self.controller.revert()
        self._load_target()

    def action_reanalyze(self) -> None:
        self.flush_to_draft()
        logger.info("user_action_reanalyze", prompt_id=self.controller.state.selected_id)
        self.app.run_controller_task("analysis", self.controller.reanalyze())

    def action_back(self) -> None:
        self.flush_to_draft()
        logger.info("user_action_back_to_editor")
        self.controller.back()
        self.app.show_view()

    def action_copy(self) -> None:
        """Copy the text shown in the editor to the system clipboard."""
        self.app.copy_to_clipboard(self.query_one(ContentEditor).get_content())
        self.app.show_notice(Notice(message="Copied to clipboard", level="success"))
