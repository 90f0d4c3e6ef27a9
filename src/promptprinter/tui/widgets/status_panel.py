"""StatusPanel widget for connection indicators and background task progress."""

from typing import Dict

from rich.text import Text
from textual.widgets import Static

from promptprinter.models.background_task import BackgroundTask
from promptprinter.models.session import SessionState


class StatusPanel(Static):
    """One-line status bar: storage and AI indicators, then running tasks."""

    RUNNING_LABELS = {
        "connection_check": "Checking connections",
        "prompt_loading": "Loading prompts",
        "analysis": "Optimizing with AI",
        "prompt_saving": "Saving",
        "prompt_deleting": "Deleting",
    }

    FAILED_LABELS = {
        "connection_check": "Connection check failed",
        "prompt_loading": "Loading failed",
        "analysis": "Optimization failed",
        "prompt_saving": "Save failed",
        "prompt_deleting": "Delete failed",
    }

    def __init__(
        self,
        state: SessionState,
        background_tasks: Dict[str, BackgroundTask],
        *args,
        **kwargs
    ):
        """Initialize StatusPanel.

        Args:
            state: Session state to read connection flags from
            background_tasks: Dictionary mapping task_type to BackgroundTask
        """
        super().__init__("", *args, id="status-panel", **kwargs)
        self.state = state
        self.background_tasks = background_tasks

    def on_mount(self) -> None:
        """Set initial content when widget is mounted."""
        self.update_status()

    def update_status(self) -> None:
        """Rebuild the status line from the session state and task dict."""
        text = Text()
        text.append_text(self._indicator("Storage", self.state.db_connected))
        text.append("  ")
        text.append_text(self._indicator(f"AI ({self.state.backend.value})", self.state.ai_connected))

        task_parts = []
        for task in self.background_tasks.values():
            if task.status == "running":
                task_parts.append(f"{self.RUNNING_LABELS.get(task.task_type, task.task_type)}...")
            elif task.status == "failed":
                label = self.FAILED_LABELS.get(task.task_type, "Task failed")
                if task.error_message:
                    task_parts.append(f"⚠ {label}: {task.error_message}")
                else:
                    task_parts.append(f"⚠ {label}")

        text.append("  |  ", style="dim")
        text.append(" | ".join(task_parts) if task_parts else "Ready")
        self.update(text)

    @staticmethod
    def _indicator(label: str, connected: bool) -> Text:
        text = Text()
        text.append("● ", style="bold green" if connected else "bold red")
        text.append(f"{label}: {'online' if connected else 'offline'}")
        return text
