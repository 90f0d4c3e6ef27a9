"""Shared behaviour for the three workflow screens."""

from textual.screen import Screen

from promptprinter.services.workflow import WorkflowController
from promptprinter.tui.widgets.status_panel import StatusPanel


class WorkflowScreen(Screen):
    """A screen rendering one view of the controller's session state."""

    @property
    def controller(self) -> WorkflowController:
        """The app-wide workflow controller."""
        return self.app.controller

    def make_status_panel(self) -> StatusPanel:
        return StatusPanel(state=self.controller.state, background_tasks=self.app.background_tasks)

    def refresh_from_state(self) -> None:
        """Re-render after a controller operation that kept this view."""
        if not self.is_mounted:
            return
        self.query_one(StatusPanel).update_status()
        self.render_state()

    def render_state(self) -> None:
        """Screen-specific re-render (override)."""

    def flush_to_draft(self) -> None:
        """Copy unsaved widget values into the session (screens with inputs override)."""

    def on_screen_resume(self) -> None:
        self.refresh_from_state()
