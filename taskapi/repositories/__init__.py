"""Repositories: storage queries and writes returning normalized entities."""

from taskapi.repositories.tasks import TaskRepository
from taskapi.repositories.users import UserRepository

__all__ = ["TaskRepository", "UserRepository"]
