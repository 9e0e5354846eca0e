"""Entity factories: the boundary between raw input or stored data and entities."""

from taskapi.factories.task import ANONYMOUS_OWNER, TaskFactory, task_factory
from taskapi.factories.user import UserFactory, user_factory

__all__ = [
    "ANONYMOUS_OWNER",
    "TaskFactory",
    "task_factory",
    "UserFactory",
    "user_factory",
]
