"""Task service: orchestration over the task repository."""

import logging
from typing import Any

from taskapi.exceptions import NotFoundError
from taskapi.factories.task import TaskFactory, task_factory
from taskapi.models.task import Task, TaskCreate
from taskapi.repositories.tasks import TaskRepository
from taskapi.services.authorization import ensure_owner, resolve_list_target

logger = logging.getLogger(__name__)


class TaskService:
    """Task use cases for an authenticated caller."""

    def __init__(self, repository: TaskRepository, factory: TaskFactory = task_factory) -> None:
        self.repository = repository
        self.factory = factory

    async def list_tasks(
        self, caller_id: str, requested_id: str | None = None
    ) -> tuple[list[Task], str]:
        """
        List tasks for the caller, newest first.

        Args:
            caller_id: Authenticated user id.
            requested_id: Optional explicit target user id.

        Returns:
            (tasks, queried_user_id)

        Raises:
            ForbiddenError: If ``requested_id`` is another user.
        """
        user_id = resolve_list_target(caller_id, requested_id)
        tasks = await self.repository.list_by_owner(user_id)
        return tasks, user_id

    async def create_task(self, owner_id: str, data: TaskCreate) -> Task:
        """Create a task owned by the caller; any client-sent owner is ignored."""
        task = self.factory.from_create(
            owner_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
        )
        task = await self.repository.create(task)
        logger.info("Task created", extra={"task_id": task.id, "user_id": owner_id})
        return task

    async def get_owned_task(self, task_id: str, caller_id: str) -> Task:
        """
        Fetch a task and check that the caller owns it.

        Raises:
            NotFoundError: If the task does not exist.
            ForbiddenError: If another user owns it.
        """
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return ensure_owner(task, caller_id)

    async def update_task(self, task_id: str, caller_id: str, changes: dict[str, Any]) -> Task:
        """Apply a partial update to one of the caller's tasks."""
        existing = await self.get_owned_task(task_id, caller_id)
        updated = self.factory.apply_update(existing, changes)
        return await self._save(task_id, existing, updated, caller_id)

    async def complete_task(self, task_id: str, caller_id: str) -> Task:
        """Mark a pending task as completed.

        Raises:
            ConflictError: If the task is already completed.
        """
        existing = await self.get_owned_task(task_id, caller_id)
        return await self._save(task_id, existing, self.factory.mark_completed(existing), caller_id)

    async def reopen_task(self, task_id: str, caller_id: str) -> Task:
        """Mark a completed task as pending.

        Raises:
            ConflictError: If the task is already pending.
        """
        existing = await self.get_owned_task(task_id, caller_id)
        return await self._save(task_id, existing, self.factory.mark_pending(existing), caller_id)

    async def delete_task(self, task_id: str, caller_id: str) -> None:
        """Permanently delete one of the caller's tasks."""
        await self.get_owned_task(task_id, caller_id)
        if not await self.repository.delete(task_id):
            raise NotFoundError("task", task_id)
        logger.info("Task deleted", extra={"task_id": task_id, "user_id": caller_id})

    async def _save(self, task_id: str, existing: Task, updated: Task, caller_id: str) -> Task:
        changes = {
            field: getattr(updated, field)
            for field in ("title", "description", "is_done", "priority")
            if getattr(updated, field) != getattr(existing, field)
        }
        if not changes:
            return existing
        saved = await self.repository.update(task_id, changes)
        if saved is None:
            raise NotFoundError("task", task_id)
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "user_id": caller_id, "fields": sorted(changes)},
        )
        return saved
