"""LIST screen: browse, search and delete stored prompts."""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Footer, Input, Label, ListView
import structlog

from promptprinter.models.config import AIBackend
from promptprinter.models.prompt_record import PromptRecord
from promptprinter.tui.screens.base import WorkflowScreen
from promptprinter.tui.screens.dialogs import ConfirmDialog, SchemaDialog
from promptprinter.tui.widgets.prompt_list import PromptList, PromptListItem

logger = structlog.get_logger()


class PromptListScreen(WorkflowScreen):
    """Prompt library: a searchable list of stored prompts."""

    DEFAULT_CSS = """
    #list-container {
        height: 1fr;
        layout: vertical;
        padding: 0 1;
    }

    #list-title {
        height: auto;
        text-style: bold;
    }

    #search-input {
        height: auto;
    }

    #prompt-list {
        height: 1fr;
        border: solid $accent;
    }

    #empty-hint {
        height: auto;
        color: $text-muted;
    }

    #status-panel {
        height: 1;
        padding: 0 1;
    }
    """

    AUTO_FOCUS = "#prompt-list"

    BINDINGS = [
        ("n", "new_prompt", "New"),
        ("d", "delete_prompt", "Delete"),
        ("r", "refresh", "Refresh"),
        ("c", "check_connections", "Check connections"),
        ("slash", "focus_search", "Search"),
        ("b", "switch_backend", "Switch AI"),
        ("s", "show_schema", "Storage setup"),
        ("escape", "focus_list", "List"),
        ("q", "app.quit", "Quit"),
    ]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._shown: Optional[list[tuple]] = None

    def compose(self) -> ComposeResult:
        """Compose the listing layout."""
        with Vertical(id="list-container"):
            yield Label("Prompt library", id="list-title")
            yield Input(
                value=self.controller.state.search_term,
                placeholder="Search by title",
                id="search-input",
            )
            yield PromptList()
            yield Label("", id="empty-hint")

        yield self.make_status_panel()
        yield Footer()

    def on_mount(self) -> None:
        self.render_state()

    def render_state(self) -> None:
        """Re-render the listing when the filtered records changed."""
        records = self.controller.filtered_prompts()
        fingerprint = [(r.id, r.version, r.title, r.summary) for r in records]
        if fingerprint != self._shown:
            self._shown = fingerprint
            self.query_one(PromptList).set_records(records)

        hint = self.query_one("#empty-hint", Label)
        state = self.controller.state
        if state.loading:
            hint.update("Loading prompts...")
        elif not records and state.search_term:
            hint.update(f"No prompt titles contain \"{state.search_term}\"")
        elif not records:
            hint.update("No prompts yet. Press n to create one.")
        else:
            hint.update(f"{len(records)} prompt{'s' if len(records) != 1 else ''}")

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self.controller.set_search_term(event.value)
            self.refresh_from_state()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_focus_list()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        """Open the selected prompt in the editor."""
        if isinstance(event.item, PromptListItem):
            self.controller.select_existing(event.item.record)
            self.app.show_view()

    def action_new_prompt(self) -> None:
        self.controller.create_new()
        self.app.show_view()

    def action_refresh(self) -> None:
        logger.info("user_action_refresh")
        self.app.run_controller_task("prompt_loading", self.controller.refresh_prompts())

    def action_check_connections(self) -> None:
        logger.info("user_action_check_connections")
        self.app.run_controller_task("connection_check", self.controller.check_connections())

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_focus_list(self) -> None:
        self.query_one(PromptList).focus()

    def action_switch_backend(self) -> None:
        """Toggle between the two AI backends."""
        current = self.controller.state.backend
        target = AIBackend.OPENAI_COMPAT if current == AIBackend.GEMINI else AIBackend.GEMINI
        logger.info("user_action_switch_backend", from_backend=current.value, to_backend=target.value)
        self.app.run_controller_task("connection_check", self.controller.select_backend(target))

    def action_show_schema(self) -> None:
        self.app.push_screen(SchemaDialog(self.controller.store.get_schema_description()))

    def action_delete_prompt(self) -> None:
        """Ask for confirmation, then delete the highlighted prompt."""
        record = self.query_one(PromptList).highlighted_record
        if record is None or record.id is None:
            return

        def on_confirm(confirmed: bool) -> None:
            self._delete_confirmed(record, confirmed)

        self.app.push_screen(
            ConfirmDialog(f"Delete \"{record.title}\" ({record.version})? This cannot be undone."),
            on_confirm,
        )

    def _delete_confirmed(self, record: PromptRecord, confirmed: bool) -> None:
        if not confirmed:
            logger.info("user_action_delete_cancelled", prompt_id=record.id)
            return
        self.app.run_controller_task("prompt_deleting", self.controller.delete_prompt(record.id))
