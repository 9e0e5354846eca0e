"""Ownership policy for task operations.

The acting user is always the authenticated caller. Reads may name a target
user only if it is the caller; writes on an existing task require the stored
owner to be the caller.
"""

import logging

from taskapi.exceptions import ForbiddenError
from taskapi.models.task import Task

logger = logging.getLogger(__name__)

CROSS_USER_ACCESS = "FORBIDDEN_CROSS_USER_ACCESS"


def resolve_list_target(caller_id: str, requested_id: str | None) -> str:
    """
    Decide whose tasks a listing returns.

    Args:
        caller_id: Authenticated user id.
        requested_id: Optional ``id_user`` query parameter.

    Returns:
        The user id to query, always the caller's.

    Raises:
        ForbiddenError: If ``requested_id`` names another user. The error
            envelope carries the caller's id, not the requested one.
    """
    if requested_id is not None and requested_id != caller_id:
        logger.warning(
            "Cross-user task listing rejected",
            extra={"user_id": caller_id, "requested_user_id": requested_id},
        )
        raise ForbiddenError(
            "You can only access your own tasks",
            code=CROSS_USER_ACCESS,
            extra={"id_user": caller_id},
        )
    return caller_id


def ensure_owner(task: Task, caller_id: str) -> Task:
    """Raises ForbiddenError unless ``caller_id`` owns ``task``."""
    if task.owner_id != caller_id:
        logger.warning(
            "Task access by non-owner rejected",
            extra={"user_id": caller_id, "task_id": task.id},
        )
        raise ForbiddenError(
            "You do not have permission to modify this task",
            code=CROSS_USER_ACCESS,
            extra={"id_user": caller_id},
        )
    return task
