"""PromptList widget: the stored prompt listing."""

from typing import Optional

from rich.text import Text
from textual.widgets import ListView, ListItem, Static

from promptprinter.models.prompt_record import PromptRecord


class PromptListItem(ListItem):
    """
    A single stored prompt in the listing.

    Shows the title, version tag and creation date on the first line and
    the summary (dimmed) below it.
    """

    def __init__(self, record: PromptRecord):
        super().__init__()
        self.record = record

    def compose(self):
        """Compose the list item layout."""
        text = Text()
        text.append(self.record.title or "(untitled)", style="bold")
        text.append(f"  {self.record.version}", style="cyan")
        if self.record.created_at is not None:
            text.append(f"  {self.record.created_at:%Y-%m-%d}", style="dim")
        if self.record.summary:
            text.append(f"\n{self.record.summary}", style="dim")

        yield Static(text)


class PromptList(ListView):
    """Scrollable list of stored prompts."""

    def __init__(self, **kwargs):
        super().__init__(id="prompt-list", **kwargs)

    def set_records(self, records: list[PromptRecord]) -> None:
        """Replace the displayed records."""
        self.clear()
        self.extend(PromptListItem(record) for record in records)

    @property
    def highlighted_record(self) -> Optional[PromptRecord]:
        """Record under the cursor, if any."""
        item = self.highlighted_child
        if isinstance(item, PromptListItem):
            return item.record
        return None
