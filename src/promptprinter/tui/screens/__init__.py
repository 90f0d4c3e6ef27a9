"""Textual screens, one per workflow view, plus modal dialogs."""

from promptprinter.tui.screens.dialogs import ConfirmDialog, SchemaDialog
from promptprinter.tui.screens.prompt_editor import PromptEditorScreen
from promptprinter.tui.screens.prompt_list import PromptListScreen
from promptprinter.tui.screens.prompt_preview import PromptPreviewScreen

__all__ = [
    "ConfirmDialog",
    "PromptEditorScreen",
    "PromptListScreen",
    "PromptPreviewScreen",
    "SchemaDialog",
]
