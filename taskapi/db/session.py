"""MongoDB client management.

One ``AsyncMongoClient`` is shared by the whole process; pymongo's async
client is safe for concurrent use, so requests borrow it without locking.
"""

import logging

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from taskapi.config import get_settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
TASKS_COLLECTION = "tasks"

_client: AsyncMongoClient | None = None


def get_client() -> AsyncMongoClient:
    """Get the process-wide client, creating it on first use."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = AsyncMongoClient(settings.MONGODB_URL, tz_aware=True)
    return _client


def get_database() -> AsyncDatabase:
    """Get the application database (FastAPI dependency)."""
    return get_client()[get_settings().MONGODB_DATABASE]


async def ensure_indexes(database: AsyncDatabase) -> None:
    """Create the indexes the repositories rely on."""
    await database[USERS_COLLECTION].create_index("mail", unique=True)
    await database[TASKS_COLLECTION].create_index(
        [("id_user", ASCENDING), ("created_at", DESCENDING)]
    )
    logger.info("MongoDB indexes ensured", extra={"database": database.name})


async def close_client() -> None:
    """Close the shared client, if one was created."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
