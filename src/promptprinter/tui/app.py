"""Main Prompt Printer TUI Application.

The app owns one ``WorkflowController`` and shows one screen per workflow
view (LIST, EDIT, PREVIEW). Screens forward user actions to the controller;
after every controller operation the app calls ``show_view()``, which either
switches to the screen for the controller's new view or re-renders the
current one.

## Background work

Network-bound controller operations (connection checks, listing, analysis,
save, delete) run as Textual workers via ``run_controller_task()``. Each
registers a ``BackgroundTask`` in ``app.background_tasks`` so the status
panel can show what is running or what failed. No in-flight call is ever
cancelled: an analysis that resolves after the user navigated away is
discarded by the controller.
"""

from typing import Awaitable, Dict, Optional

from textual.app import App
from textual.binding import Binding
from textual.worker import Worker
import structlog

from promptprinter.models.background_task import BackgroundTask, TaskType
from promptprinter.models.session import NOTICE_TIMEOUT, Notice, ViewMode
from promptprinter.services.workflow import WorkflowController
from promptprinter.tui.screens import PromptEditorScreen, PromptListScreen, PromptPreviewScreen
from promptprinter.tui.screens.base import WorkflowScreen

logger = structlog.get_logger()


class PromptPrinterApp(App):
    """Main Prompt Printer TUI Application."""

    TITLE = "Prompt Printer"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(self, controller: WorkflowController, auto_connect: bool = True):
        """Initialize the app.

        Args:
            controller: Workflow controller holding the session state
            auto_connect: Probe connections and load prompts on mount (False in tests)
        """
        super().__init__()
        self.controller = controller
        self.controller.on_notice = self.show_notice
        self.auto_connect = auto_connect

        self.background_tasks: Dict[str, BackgroundTask] = {}
        self._current_view: Optional[ViewMode] = None

        logger.info(
            "app_initialized",
            backend=controller.state.backend.value,
            store=controller.store.name,
        )

    def on_mount(self) -> None:
        """Show the listing, then probe connections and load prompts."""
        self._current_view = self.controller.state.view
        self.push_screen(self._build_screen(self._current_view))

        if self.auto_connect:
            self.run_controller_task("connection_check", self.controller.check_connections())
            self.run_controller_task("prompt_loading", self.controller.refresh_prompts())

    def _build_screen(self, view: ViewMode) -> WorkflowScreen:
        if view == ViewMode.EDIT:
            return PromptEditorScreen(name="edit")
        if view == ViewMode.PREVIEW:
            return PromptPreviewScreen(name="preview")
        return PromptListScreen(name="list")

    def show_view(self) -> None:
        """Bring the displayed screen in line with the controller's view."""
        screen = self.screen
        if not isinstance(screen, WorkflowScreen):
            # A modal dialog is open; it re-syncs on dismissal
            return

        view = self.controller.state.view
        if view == self._current_view:
            screen.refresh_from_state()
            return

        # Edits typed while a worker was running would otherwise be lost
        if view != ViewMode.LIST:
            screen.flush_to_draft()

        logger.info(
            "screen_transition",
            from_view=self._current_view.value if self._current_view else None,
            to_view=view.value,
        )
        self._current_view = view
        self.switch_screen(self._build_screen(view))

    def show_notice(self, notice: Notice) -> None:
        """Display a notice as a toast; a newer notice replaces the previous one."""
        self.clear_notifications()
        severity = "error" if notice.level == "error" else "information"
        self.notify(notice.message, severity=severity, timeout=NOTICE_TIMEOUT)

    def run_controller_task(self, task_type: TaskType, operation: Awaitable) -> Worker:
        """Run a controller coroutine as a worker tracked in ``background_tasks``.

        Args:
            task_type: Status-panel category for the operation
            operation: Controller coroutine to await
        """
        return self.run_worker(self._controller_task(task_type, operation), name=task_type)

    async def _controller_task(self, task_type: TaskType, operation: Awaitable) -> None:
        task = BackgroundTask(task_type=task_type, status="running")
        self.background_tasks[task_type] = task
        self.show_view()

        try:
            await operation
            task.status = "completed"
        except Exception as e:
            task.status = "failed"
            task.error_message = str(e)
            logger.error("background_task_failed", task_type=task_type, error=str(e))
            self.show_notice(Notice(message=f"Unexpected error: {e}", level="error"))

        self.show_view()
