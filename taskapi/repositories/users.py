"""User repository backed by the ``users`` collection."""

import logging

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from taskapi.db.session import USERS_COLLECTION
from taskapi.exceptions import ConflictError, InternalError
from taskapi.factories.user import MAIL_FIELDS, UserFactory, user_factory
from taskapi.models.user import User
from taskapi.repositories.tasks import to_object_id

logger = logging.getLogger(__name__)


class UserRepository:
    """Storage access for users."""

    def __init__(self, database: AsyncDatabase, factory: UserFactory = user_factory) -> None:
        self._collection = database[USERS_COLLECTION]
        self._factory = factory

    async def get_by_mail(self, mail: str) -> User | None:
        """Look up a user by normalized email, including legacy ``email`` documents."""
        try:
            document = await self._collection.find_one(
                {"$or": [{field: mail} for field in MAIL_FIELDS]}
            )
        except PyMongoError as exc:
            raise InternalError("Could not retrieve user", context={"mail": mail}) from exc
        if document is None:
            return None
        return self._factory.from_storage(document["_id"], document)

    async def get_by_id(self, user_id: str) -> User | None:
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        try:
            document = await self._collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise InternalError("Could not retrieve user", context={"user_id": user_id}) from exc
        if document is None:
            return None
        return self._factory.from_storage(document["_id"], document)

    async def create(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the unique index on ``mail`` rejects the insert.
            InternalError: On any other storage failure.
        """
        try:
            result = await self._collection.insert_one(self._factory.to_document(user))
        except DuplicateKeyError as exc:
            logger.info("Concurrent registration detected", extra={"mail": user.mail})
            raise ConflictError("User already exists", context={"mail": user.mail}) from exc
        except PyMongoError as exc:
            raise InternalError("Could not create user", context={"mail": user.mail}) from exc
        return user.model_copy(update={"id": str(result.inserted_id)})
