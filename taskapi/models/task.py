"""Task entity and request/response schemas."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field, StrictBool, StrictInt, model_validator
from pydantic_core import PydanticCustomError

from taskapi.models.rules import (
    check_priority,
    normalize_description,
    normalize_task_id,
    normalize_title,
    normalize_user_id,
)

Title = Annotated[str, AfterValidator(normalize_title)]
Description = Annotated[str | None, AfterValidator(normalize_description)]
DescriptionText = Annotated[str, AfterValidator(normalize_description)]
Priority = Annotated[StrictInt, AfterValidator(check_priority)]
TaskId = Annotated[str, AfterValidator(normalize_task_id)]
UserId = Annotated[str, AfterValidator(normalize_user_id)]


class Task(BaseModel):
    """Task domain entity.

    Instances come from ``TaskFactory``; ``owner_id`` is always a plain
    user id string, whatever form the stored reference had.
    """

    id: str | None = None
    title: str
    description: str = ""
    is_done: bool = False
    priority: int = 0
    created_at: datetime
    owner_id: str


class TaskCreate(BaseModel):
    """Schema for task creation."""

    title: Title
    description: Description = ""
    priority: Priority = 0


class TaskUpdate(BaseModel):
    """Schema for a partial task update identified by id."""

    id: TaskId
    title: Title | None = None
    # null means "not provided"; clearing takes an empty string
    description: DescriptionText | None = None
    is_done: StrictBool | None = None
    priority: Priority | None = None

    @model_validator(mode="after")
    def require_changes(self) -> "TaskUpdate":
        if not self.changes():
            raise PydanticCustomError(
                "no_changes",
                "At least one of title, description, is_done or priority must be provided",
            )
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, without the id."""
        return {
            key: value
            for key, value in self.model_dump(exclude={"id"}, exclude_unset=True).items()
            if value is not None
        }


class TaskRef(BaseModel):
    """Schema for operations that only need a task id."""

    id: TaskId


class TaskListQuery(BaseModel):
    """Query parameters for listing tasks."""

    id_user: UserId | None = None


class TaskResponse(BaseModel):
    """Schema for task response."""

    id: str
    title: str
    description: str
    is_done: bool
    priority: int
    created_at: str


class TaskEnvelope(BaseModel):
    """Envelope returned by create/update/complete/reopen."""

    success: bool = True
    message: str
    data: TaskResponse
    timestamp: str
    id_user: str


class TaskListEnvelope(BaseModel):
    """Envelope returned by the task listing."""

    success: bool = True
    message: str
    data: list[TaskResponse]
    timestamp: str
    count: int = Field(description="Tasks in this response")
    completed: int
    pending: int
    id_user: str
