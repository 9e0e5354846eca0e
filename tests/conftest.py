"""Shared pytest fixtures.

API tests run against the real application with the repository dependencies
replaced by in-memory fakes, so no MongoDB server is needed.
"""

import os

# Settings are read once; set them before any taskapi import.
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["MONGODB_DATABASE"] = "taskapi_test"
os.environ["LOG_LEVEL"] = "WARNING"

from collections.abc import Callable

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from taskapi.api.deps import get_task_repository, get_user_repository
from taskapi.exceptions import ConflictError
from taskapi.main import app
from taskapi.models.task import Task
from taskapi.models.user import User
from taskapi.services.auth import Identity, get_token_service


class FakeTaskRepository:
    """In-memory stand-in for TaskRepository."""

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        owned = [task for task in self.tasks.values() if task.owner_id == owner_id]
        return sorted(owned, key=lambda task: task.created_at, reverse=True)

    async def get_by_id(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    async def create(self, task: Task) -> Task:
        saved = task.model_copy(update={"id": str(ObjectId())})
        self.tasks[saved.id] = saved
        return saved

    async def update(self, task_id: str, changes: dict) -> Task | None:
        if task_id not in self.tasks:
            return None
        self.tasks[task_id] = self.tasks[task_id].model_copy(update=changes)
        return self.tasks[task_id]

    async def delete(self, task_id: str) -> bool:
        return self.tasks.pop(task_id, None) is not None


class FakeUserRepository:
    """In-memory stand-in for UserRepository with a unique mail constraint."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    async def get_by_mail(self, mail: str) -> User | None:
        return next((user for user in self.users.values() if user.mail == mail), None)

    async def get_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def create(self, user: User) -> User:
        if await self.get_by_mail(user.mail) is not None:
            raise ConflictError("User already exists")
        saved = user.model_copy(update={"id": str(ObjectId())})
        self.users[saved.id] = saved
        return saved


@pytest.fixture
def task_repository() -> FakeTaskRepository:
    return FakeTaskRepository()


@pytest.fixture
def user_repository() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def client(task_repository, user_repository):
    """TestClient wired to the fake repositories (lifespan not started)."""
    app.dependency_overrides[get_task_repository] = lambda: task_repository
    app.dependency_overrides[get_user_repository] = lambda: user_repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header for an arbitrary user."""

    def _headers(user_id: str = "user-a", mail: str = "a@example.com") -> dict[str, str]:
        token = get_token_service().issue(Identity(user_id=user_id, mail=mail))
        return {"Authorization": f"Bearer {token}"}

    return _headers
