"""BackgroundTask model for async operations."""

from pydantic import BaseModel, Field
from typing import Literal, Optional


TaskType = Literal[
    "connection_check",
    "prompt_loading",
    "analysis",
    "prompt_saving",
    "prompt_deleting",
]


class BackgroundTask(BaseModel):
    """Background task state for async operations."""

    task_type: TaskType = Field(
        ...,
        description="Type of background task"
    )

    status: Literal["running", "completed", "failed"] = Field(
        default="running",
        description="Current task status"
    )

    error_message: Optional[str] = Field(
        default=None,
        description="Error details if status is 'failed'"
    )

    model_config = {"frozen": False}  # Allow mutation as task progresses
