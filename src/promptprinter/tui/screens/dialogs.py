"""Modal dialogs: delete confirmation and storage schema display."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, TextArea

from promptprinter.models.session import Notice


class ConfirmDialog(ModalScreen[bool]):
    """Yes/no confirmation. Dismisses with True when confirmed."""

    DEFAULT_CSS = """
    ConfirmDialog {
        align: center middle;
    }

    #confirm-box {
        width: 60;
        height: auto;
        border: thick $warning;
        background: $surface;
        padding: 1 2;
    }

    #confirm-buttons {
        height: auto;
        align: right middle;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("y", "confirm", "Yes"),
        ("n", "cancel", "No"),
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, message: str, **kwargs):
        super().__init__(**kwargs)
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-box"):
            yield Label(self.message, id="confirm-message")
            with Horizontal(id="confirm-buttons"):
                yield Button("Delete", variant="error", id="confirm-yes")
                yield Button("Cancel", id="confirm-no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class SchemaDialog(ModalScreen[None]):
    """Shows the storage schema description for first-time setup."""

    DEFAULT_CSS = """
    SchemaDialog {
        align: center middle;
    }

    #schema-box {
        width: 90%;
        height: 80%;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    #schema-text {
        height: 1fr;
    }

    #schema-buttons {
        height: auto;
        align: right middle;
    }
    """

    BINDINGS = [
        Binding("c", "copy", "Copy", priority=True),
        ("escape", "close", "Close"),
    ]

    def __init__(self, description: str, **kwargs):
        super().__init__(**kwargs)
        self.description = description

    def compose(self) -> ComposeResult:
        with Vertical(id="schema-box"):
            yield Label("Storage setup (press c to copy, then paste into your database console)")
            yield TextArea(self.description, read_only=True, id="schema-text")
            with Horizontal(id="schema-buttons"):
                yield Button("Copy", variant="primary", id="schema-copy")
                yield Button("Close", id="schema-close")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "schema-copy":
            self.action_copy()
        else:
            self.dismiss(None)

    def action_copy(self) -> None:
        self.app.copy_to_clipboard(self.description)
        self.app.show_notice(Notice(message="Schema copied to clipboard", level="success"))

    def action_close(self) -> None:
        self.dismiss(None)
