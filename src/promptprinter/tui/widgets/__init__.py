"""Textual widget components."""

from promptprinter.tui.widgets.change_log import ChangeLog
from promptprinter.tui.widgets.content_editor import ContentEditor
from promptprinter.tui.widgets.prompt_list import PromptList, PromptListItem
from promptprinter.tui.widgets.status_panel import StatusPanel

__all__ = [
    "ChangeLog",
    "ContentEditor",
    "PromptList",
    "PromptListItem",
    "StatusPanel",
]
