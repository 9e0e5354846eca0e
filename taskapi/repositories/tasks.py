"""Task repository backed by the ``tasks`` collection."""

import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure, PyMongoError

from taskapi.db.session import TASKS_COLLECTION
from taskapi.exceptions import InternalError
from taskapi.factories.task import OWNER_FIELDS, TaskFactory, task_factory
from taskapi.models.task import Task

logger = logging.getLogger(__name__)


def to_object_id(value: str) -> ObjectId | None:
    """Parse a task id; ids that are not ObjectIds cannot exist."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def owner_filter(owner_id: str) -> dict[str, Any]:
    """Match tasks whatever form their owner reference was stored in."""
    object_id = to_object_id(owner_id)
    clauses: list[dict[str, Any]] = []
    for field in OWNER_FIELDS:
        clauses += [{field: owner_id}, {f"{field}.id": owner_id}, {f"{field}._id": owner_id}]
        if object_id is not None:
            clauses += [
                {field: object_id},
                {f"{field}.$id": object_id},
                {f"{field}.id": object_id},
                {f"{field}._id": object_id},
            ]
    return {"$or": clauses}


class TaskRepository:
    """Storage access for tasks. Every read goes through ``TaskFactory.from_storage``."""

    def __init__(self, database: AsyncDatabase, factory: TaskFactory = task_factory) -> None:
        self._collection = database[TASKS_COLLECTION]
        self._factory = factory

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        """
        Get all tasks owned by a user, newest first.

        Native ordering is attempted first; if the server rejects the sorted
        query, the tasks are fetched unordered. The in-memory sort always runs,
        so documents with legacy timestamp fields end up in the right place.

        Raises:
            InternalError: If the store fails.
        """
        query = owner_filter(owner_id)
        try:
            try:
                documents = await self._collection.find(query).sort(
                    "created_at", DESCENDING
                ).to_list(None)
            except OperationFailure as exc:
                logger.warning(
                    "Ordered task query failed, falling back to unordered fetch",
                    extra={"user_id": owner_id, "error": str(exc)},
                )
                documents = await self._collection.find(query).to_list(None)
        except PyMongoError as exc:
            logger.error("Failed to list tasks", extra={"user_id": owner_id, "error": str(exc)})
            raise InternalError("Could not retrieve tasks", context={"user_id": owner_id}) from exc

        tasks = [self._factory.from_storage(doc["_id"], doc) for doc in documents]
        tasks.sort(key=lambda task: task.created_at, reverse=True)
        return tasks

    async def get_by_id(self, task_id: str) -> Task | None:
        object_id = to_object_id(task_id)
        if object_id is None:
            return None
        try:
            document = await self._collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise InternalError("Could not retrieve task", context={"task_id": task_id}) from exc
        if document is None:
            return None
        return self._factory.from_storage(document["_id"], document)

    async def create(self, task: Task) -> Task:
        """Insert a new task and return it with its storage-assigned id."""
        try:
            result = await self._collection.insert_one(self._factory.to_document(task))
        except PyMongoError as exc:
            raise InternalError("Could not create task", context={"user_id": task.owner_id}) from exc
        return task.model_copy(update={"id": str(result.inserted_id)})

    async def update(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """Apply validated changes; returns None if the task no longer exists."""
        object_id = to_object_id(task_id)
        if object_id is None:
            return None
        try:
            document = await self._collection.find_one_and_update(
                {"_id": object_id},
                self._factory.to_update_document(changes),
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise InternalError("Could not update task", context={"task_id": task_id}) from exc
        if document is None:
            return None
        return self._factory.from_storage(document["_id"], document)

    async def delete(self, task_id: str) -> bool:
        object_id = to_object_id(task_id)
        if object_id is None:
            return False
        try:
            result = await self._collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            raise InternalError("Could not delete task", context={"task_id": task_id}) from exc
        return result.deleted_count == 1
