"""ContentEditor widget for editing prompt text.

Used for the draft body on the edit screen and for the live text on the
preview screen.
"""

from textual.widgets import TextArea
from textual.reactive import reactive


class ContentEditor(TextArea):
    """Multi-line text editor for prompt content."""

    editor_has_focus = reactive(False)

    def __init__(
        self,
        *args,
        id: str = "content-editor",
        **kwargs
    ):
        """Initialize ContentEditor."""
        super().__init__("", *args, id=id, **kwargs)
        self.can_focus = True
        self.show_line_numbers = False

    def on_focus(self) -> None:
        """Handle focus event."""
        self.editor_has_focus = True
        self.styles.border = ("heavy", "blue")

    def on_blur(self) -> None:
        """Handle blur event."""
        self.editor_has_focus = False
        self.styles.border = ("solid", "white")

    def load_content(self, content: str) -> None:
        """Load content into the editor.

        Args:
            content: Text content to load
        """
        self.text = content

    def get_content(self) -> str:
        """Get current content from editor.

        Returns:
            Current text content
        """
        return self.text
