"""Response envelope builders.

Success: ``{success: true, message, data, timestamp, ...extra}``
Error:   ``{success: false, message, timestamp, [statusCode], [errors], ...extra}``
"""

from collections.abc import Sequence
from typing import Any

from fastapi.encoders import jsonable_encoder

from taskapi.factories.user import user_factory
from taskapi.models.task import Task
from taskapi.models.user import User
from taskapi.utils import isoformat, utcnow


def timestamp() -> str:
    return isoformat(utcnow())


def success(message: str, data: Any = None, **extra: Any) -> dict[str, Any]:
    """Build a success envelope; ``extra`` fields are appended after the base keys."""
    return jsonable_encoder(
        {"success": True, "message": message, "data": data, "timestamp": timestamp(), **extra}
    )


def error(
    message: str,
    status_code: int | None = None,
    errors: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build an error envelope. There is never a ``data`` key."""
    envelope: dict[str, Any] = {"success": False, "message": message, "timestamp": timestamp()}
    if status_code is not None:
        envelope["statusCode"] = status_code
    if errors:
        envelope["errors"] = errors
    envelope.update(extra)
    return jsonable_encoder(envelope)


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------


def task_payload(task: Task) -> dict[str, Any]:
    """Public fields of a task; the owner reference is never exposed."""
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "is_done": task.is_done,
        "priority": task.priority,
        "created_at": isoformat(task.created_at),
    }


def task_list(tasks: Sequence[Task], user_id: str) -> dict[str, Any]:
    """List envelope with statistics over the returned tasks only."""
    completed = sum(1 for task in tasks if task.is_done)
    return success(
        "Tasks retrieved successfully",
        [task_payload(task) for task in tasks],
        count=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        id_user=user_id,
    )


def task_created(task: Task, user_id: str) -> dict[str, Any]:
    return success("Task created successfully", task_payload(task), id_user=user_id)


def task_updated(task: Task, user_id: str, message: str = "Task updated successfully") -> dict[str, Any]:
    return success(message, task_payload(task), id_user=user_id)


def task_deleted(task_id: str, user_id: str) -> dict[str, Any]:
    return success("Task deleted successfully", {"id": task_id}, id_user=user_id)


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


def safe_user(user: User) -> dict[str, Any]:
    return user_factory.to_auth_user(user).model_dump()


def auth(user: User, token: str, exists: bool) -> dict[str, Any]:
    """Login/register envelope: ``data`` stays null, the token sits at the top level."""
    message = "User already exists" if exists else "User created successfully"
    return success(message, None, token=token, exists=exists, user=safe_user(user))


def user_found(user: User, token: str) -> dict[str, Any]:
    return success("User found", None, token=token, exists=True, user=safe_user(user))


def user_profile(user: User) -> dict[str, Any]:
    return success("User profile retrieved successfully", safe_user(user))
