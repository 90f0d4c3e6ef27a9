"""EDIT screen: draft title, summary and content, with template snippets."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Input, Label, OptionList
from textual.widgets.option_list import Option
import structlog

from promptprinter.services.templates import FUNCTIONAL_TEMPLATES, get_template
from promptprinter.tui.screens.base import WorkflowScreen
from promptprinter.tui.widgets.content_editor import ContentEditor

logger = structlog.get_logger()


class PromptEditorScreen(WorkflowScreen):
    """Edit the draft. Widgets are flushed into the draft before every action."""

    DEFAULT_CSS = """
    #editor-layout {
        height: 1fr;
    }

    #editor-form {
        width: 3fr;
        padding: 0 1;
    }

    #editor-heading {
        height: auto;
        text-style: bold;
    }

    #title-input, #summary-input {
        height: auto;
    }

    ContentEditor {
        height: 1fr;
    }

    #template-panel {
        width: 1fr;
        min-width: 24;
        border-left: solid $accent;
        padding: 0 1;
    }

    #template-list {
        height: 1fr;
    }

    #status-panel {
        height: 1;
        padding: 0 1;
    }
    """

    AUTO_FOCUS = "#title-input"

    BINDINGS = [
        Binding("ctrl+g", "analyze", "AI optimize", priority=True),
        Binding("ctrl+o", "preview", "Preview", priority=True),
        Binding("ctrl+t", "focus_templates", "Templates", priority=True),
        Binding("escape", "back", "Back", priority=True),
    ]

    def compose(self) -> ComposeResult:
        """Compose the editor layout."""
        draft = self.controller.state.draft

        with Horizontal(id="editor-layout"):
            with Vertical(id="editor-form"):
                yield Label(self._heading(), id="editor-heading")
                yield Input(value=draft.title, placeholder="Title (required)", id="title-input")
                yield Input(value=draft.summary, placeholder="Summary", id="summary-input")
                yield ContentEditor()

            with Vertical(id="template-panel"):
                yield Label("Templates")
                yield OptionList(
                    *[Option(template.name, id=template.id) for template in FUNCTIONAL_TEMPLATES],
                    id="template-list",
                )

        yield self.make_status_panel()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(ContentEditor).load_content(self.controller.state.draft.content)

    def _heading(self) -> str:
        state = self.controller.state
        if state.selected_id is None:
            return "New prompt"
        return f"Editing {state.draft.title or '(untitled)'} ({state.draft.version})"

    def flush_to_draft(self) -> None:
        """Copy the widget values into the controller's draft."""
        self.controller.update_draft(
            title=self.query_one("#title-input", Input).value,
            summary=self.query_one("#summary-input", Input).value,
            content=self.query_one(ContentEditor).get_content(),
        )

    def action_analyze(self) -> None:
        self.flush_to_draft()
        logger.info("user_action_analyze", prompt_id=self.controller.state.selected_id)
        self.app.run_controller_task("analysis", self.controller.analyze())

    def action_preview(self) -> None:
        self.flush_to_draft()
        if not self.controller.open_preview():
            logger.info("preview_refused_empty_content")
            return
        self.app.show_view()

    def action_back(self) -> None:
        logger.info("user_action_back_to_list")
        self.controller.back()
        self.app.show_view()

    def action_focus_templates(self) -> None:
        self.query_one("#template-list", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Append the chosen template to the draft content."""
        template = get_template(event.option.id)
        if template is None:
            return

        self.flush_to_draft()
        self.controller.insert_template(template)

        editor = self.query_one(ContentEditor)
        editor.load_content(self.controller.state.draft.content)
        editor.focus()
