"""Domain entities and request/response schemas for the Task API."""

from taskapi.models.envelope import ERROR_RESPONSES, ErrorEnvelope, FieldError, MessageEnvelope
from taskapi.models.task import (
    Task,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskListQuery,
    TaskRef,
    TaskResponse,
    TaskUpdate,
)
from taskapi.models.user import AuthEnvelope, AuthUser, ProfileEnvelope, User, UserCreate

__all__ = [
    # Entities
    "Task",
    "User",
    # Requests
    "TaskCreate",
    "TaskUpdate",
    "TaskRef",
    "TaskListQuery",
    "UserCreate",
    # Responses
    "TaskResponse",
    "TaskEnvelope",
    "TaskListEnvelope",
    "AuthUser",
    "AuthEnvelope",
    "ProfileEnvelope",
    "ErrorEnvelope",
    "FieldError",
    "MessageEnvelope",
    "ERROR_RESPONSES",
]
