"""Task factory: construction, validation and storage reconciliation."""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from bson import DBRef, ObjectId

from taskapi.exceptions import ConflictError, ValidationError
from taskapi.factories.fields import apply_rule, coerce_datetime, first_present
from taskapi.models.rules import (
    PRIORITY_MAX,
    PRIORITY_MIN,
    check_priority,
    normalize_description,
    normalize_title,
)
from taskapi.models.task import Task
from taskapi.utils import utcnow

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER = "anonymous"

# -----------------------------------------------------------------------------
# Legacy field names, read path only. Each tuple is an ordered fallback chain;
# writes always use the first name.
# -----------------------------------------------------------------------------

DONE_FIELDS = ("is_done", "id_done", "completed")
CREATED_AT_FIELDS = ("created_at", "createdAt")
OWNER_FIELDS = ("id_user", "userId", "user_id")

UPDATABLE_FIELDS = ("title", "description", "is_done", "priority")


def _validate_priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Priority must be an integer", field="priority")
    return apply_rule(check_priority, value, "priority")


def _validate_is_done(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("is_done must be a boolean", field="is_done")
    return value


def _validate_text(rule: Callable[[Any], Any], value: Any, field: str) -> Any:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field.capitalize()} must be a string", field=field)
    return apply_rule(rule, value, field)


def _coerce_done(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _coerce_priority(value: Any) -> int:
    if isinstance(value, bool):
        return PRIORITY_MIN
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return PRIORITY_MIN
    if not isinstance(value, int):
        return PRIORITY_MIN
    return max(PRIORITY_MIN, min(PRIORITY_MAX, value))


def _coerce_owner(value: Any) -> str | None:
    """Reduce any stored owner reference to a plain user id."""
    if isinstance(value, DBRef):
        return _coerce_owner(value.id)
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, Mapping):
        return _coerce_owner(first_present(value, ("id", "_id", "$id")))
    return None


class TaskFactory:
    """Builds ``Task`` values from client input and from stored documents."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def from_create(
        self,
        owner_id: str,
        title: Any,
        description: Any = None,
        priority: Any = None,
    ) -> Task:
        """Create a new, not yet persisted task owned by ``owner_id``.

        Raises:
            ValidationError: If any field violates its constraint.
        """
        return Task(
            title=_validate_text(normalize_title, title if title is not None else "", "title"),
            description=_validate_text(normalize_description, description, "description"),
            priority=PRIORITY_MIN if priority is None else _validate_priority(priority),
            is_done=False,
            created_at=self._clock(),
            owner_id=owner_id,
        )

    def from_storage(self, task_id: Any, raw: Mapping[str, Any]) -> Task:
        """Rebuild a task from a stored document. Never raises.

        Reconciliation, in order:
            is_done     <- is_done, id_done, completed; else False
            priority    <- priority, clamped to [0, 10]; missing/garbage -> 0
            created_at  <- created_at, createdAt; missing/unparseable -> now
            owner       <- id_user, userId, user_id (string, ObjectId, DBRef or
                           {id} mapping); none -> "anonymous"
        """
        created_at = coerce_datetime(first_present(raw, CREATED_AT_FIELDS))
        if created_at is None:
            logger.debug("Task without usable created_at", extra={"task_id": str(task_id)})
            created_at = self._clock()

        owner_id = None
        for name in OWNER_FIELDS:
            owner_id = _coerce_owner(raw.get(name))
            if owner_id:
                break

        title = raw.get("title")
        description = raw.get("description")
        return Task(
            id=str(task_id),
            title=title.strip() if isinstance(title, str) else "",
            description=description.strip() if isinstance(description, str) else "",
            is_done=_coerce_done(first_present(raw, DONE_FIELDS)),
            priority=_coerce_priority(raw.get("priority")),
            created_at=created_at,
            owner_id=owner_id or ANONYMOUS_OWNER,
        )

    def validate_changes(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Validate only the fields present in a partial update.

        Raises:
            ValidationError: On an unknown field or a constraint violation.
        """
        validators: dict[str, Callable[[Any], Any]] = {
            "title": lambda value: _validate_text(normalize_title, value, "title"),
            "description": lambda value: _validate_text(normalize_description, value, "description"),
            "is_done": _validate_is_done,
            "priority": _validate_priority,
        }
        validated = {}
        for field, value in changes.items():
            if field not in validators:
                raise ValidationError(f"Field '{field}' cannot be updated", field=field)
            validated[field] = validators[field](value)
        return validated

    def apply_update(self, existing: Task, changes: Mapping[str, Any]) -> Task:
        """Return ``existing`` with the validated changes applied."""
        return existing.model_copy(update=self.validate_changes(changes))

    def mark_completed(self, task: Task) -> Task:
        """Raises ConflictError if the task is already completed."""
        if task.is_done:
            raise ConflictError(
                "Task is already marked as completed",
                context={"task_id": task.id},
            )
        return task.model_copy(update={"is_done": True})

    def mark_pending(self, task: Task) -> Task:
        """Raises ConflictError if the task is already pending."""
        if not task.is_done:
            raise ConflictError(
                "Task is already marked as pending",
                context={"task_id": task.id},
            )
        return task.model_copy(update={"is_done": False})

    @staticmethod
    def to_document(task: Task) -> dict[str, Any]:
        """Canonical stored form of a new task."""
        return {
            "title": task.title,
            "description": task.description,
            "is_done": task.is_done,
            "priority": task.priority,
            "created_at": task.created_at,
            "id_user": task.owner_id,
        }

    @staticmethod
    def to_update_document(changes: Mapping[str, Any]) -> dict[str, Any]:
        """``$set`` document for a validated partial update."""
        return {"$set": {field: changes[field] for field in UPDATABLE_FIELDS if field in changes}}


task_factory = TaskFactory()
