"""ChangeLog widget listing the changes an analysis made."""

from rich.text import Text
from textual.widgets import Static


class ChangeLog(Static):
    """Bulleted list of analysis change-log entries."""

    def __init__(self, **kwargs):
        super().__init__("", id="change-log", **kwargs)

    def show_changes(self, changes: list[str]) -> None:
        """Render the given entries (an empty list renders a placeholder)."""
        if not changes:
            self.update(Text("No changes recorded", style="dim"))
            return

        text = Text()
        for index, change in enumerate(changes):
            if index:
                text.append("\n")
            text.append("• ", style="green")
            text.append(change)
        self.update(text)
