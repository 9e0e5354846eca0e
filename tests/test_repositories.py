"""Tests for the MongoDB repositories, using mocked pymongo collections."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import DBRef, ObjectId
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from taskapi.exceptions import ConflictError, InternalError
from taskapi.factories.task import task_factory
from taskapi.factories.user import user_factory
from taskapi.repositories.tasks import TaskRepository, owner_filter
from taskapi.repositories.users import UserRepository

OWNER = "665f1c2e8b3a4d0012345678"


def _doc(day: int, legacy: bool = False) -> dict:
    created = datetime(2026, 1, day, tzinfo=timezone.utc)
    doc = {"_id": ObjectId(), "title": f"day {day}", "id_user": OWNER}
    doc["createdAt" if legacy else "created_at"] = created
    return doc


@pytest.fixture
def collection() -> MagicMock:
    return MagicMock()


@pytest.fixture
def database(collection) -> MagicMock:
    db = MagicMock()
    db.__getitem__.return_value = collection
    return db


class TestOwnerFilter:
    """Owner query covers every stored reference form."""

    def test_includes_legacy_names_and_native_references(self):
        clauses = owner_filter(OWNER)["$or"]

        assert {"id_user": OWNER} in clauses
        assert {"userId": OWNER} in clauses
        assert {"user_id": OWNER} in clauses
        assert {"id_user": ObjectId(OWNER)} in clauses
        assert {"id_user.$id": ObjectId(OWNER)} in clauses

    @pytest.mark.parametrize("field", ["id_user", "userId", "user_id"])
    def test_every_owner_name_accepts_every_reference_form(self, field):
        """Whatever from_storage resolves to the owner is also matched by the query."""
        clauses = owner_filter(OWNER)["$or"]

        assert {field: ObjectId(OWNER)} in clauses
        assert {f"{field}.$id": ObjectId(OWNER)} in clauses
        assert {f"{field}.id": OWNER} in clauses
        assert {f"{field}._id": OWNER} in clauses
        assert {f"{field}.id": ObjectId(OWNER)} in clauses
        assert {f"{field}._id": ObjectId(OWNER)} in clauses

    def test_dbref_under_legacy_name_resolves_to_queried_owner(self):
        task = task_factory.from_storage(ObjectId(), {"title": "x", "userId": DBRef("users", ObjectId(OWNER))})

        assert task.owner_id == OWNER
        assert {"userId.$id": ObjectId(OWNER)} in owner_filter(OWNER)["$or"]

    def test_non_object_id_owner_uses_strings_only(self):
        clauses = owner_filter("anonymous")["$or"]

        assert all(not isinstance(value, ObjectId) for clause in clauses for value in clause.values())


@pytest.mark.asyncio
class TestTaskRepositoryListing:
    """list_by_owner() ordering and fallback."""

    async def test_native_ordering(self, database, collection):
        """The sorted query is used when the server accepts it."""
        cursor = MagicMock()
        cursor.sort.return_value.to_list = AsyncMock(return_value=[_doc(3), _doc(1)])
        collection.find.return_value = cursor

        tasks = await TaskRepository(database).list_by_owner(OWNER)

        cursor.sort.assert_called_once_with("created_at", -1)
        assert [task.title for task in tasks] == ["day 3", "day 1"]

    async def test_falls_back_to_in_memory_sort(self, database, collection):
        """A rejected sorted query is retried unordered and sorted in memory."""
        cursor = MagicMock()
        cursor.sort.return_value.to_list = AsyncMock(
            side_effect=OperationFailure("Sort exceeded memory limit")
        )
        cursor.to_list = AsyncMock(return_value=[_doc(1), _doc(5, legacy=True), _doc(3)])
        collection.find.return_value = cursor

        tasks = await TaskRepository(database).list_by_owner(OWNER)

        assert [task.title for task in tasks] == ["day 5", "day 3", "day 1"]

    async def test_in_memory_sort_fixes_legacy_timestamps(self, database, collection):
        """Documents with createdAt are placed correctly even on the native path."""
        cursor = MagicMock()
        cursor.sort.return_value.to_list = AsyncMock(
            return_value=[_doc(4), _doc(2), _doc(9, legacy=True)]
        )
        collection.find.return_value = cursor

        tasks = await TaskRepository(database).list_by_owner(OWNER)

        assert [task.title for task in tasks] == ["day 9", "day 4", "day 2"]

    async def test_storage_failure_is_internal_error(self, database, collection):
        cursor = MagicMock()
        cursor.sort.return_value.to_list = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        collection.find.return_value = cursor

        with pytest.raises(InternalError):
            await TaskRepository(database).list_by_owner(OWNER)


@pytest.mark.asyncio
class TestTaskRepositoryWrites:
    """get/create/update/delete."""

    async def test_get_with_malformed_id_skips_query(self, database, collection):
        """Ids that are not ObjectIds cannot exist."""
        collection.find_one = AsyncMock()

        assert await TaskRepository(database).get_by_id("not-an-id") is None
        collection.find_one.assert_not_called()

    async def test_get_reconciles_document(self, database, collection):
        task_id = ObjectId()
        collection.find_one = AsyncMock(
            return_value={"_id": task_id, "title": "x", "id_done": True, "userId": OWNER}
        )

        task = await TaskRepository(database).get_by_id(str(task_id))

        assert task.id == str(task_id)
        assert task.is_done is True
        assert task.owner_id == OWNER

    async def test_create_writes_canonical_document(self, database, collection):
        inserted_id = ObjectId()
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted_id))
        task = task_factory.from_create(OWNER, title="New")

        saved = await TaskRepository(database).create(task)

        document = collection.insert_one.call_args.args[0]
        assert document["id_user"] == OWNER
        assert document["is_done"] is False
        assert "_id" not in document
        assert saved.id == str(inserted_id)

    async def test_update_sets_changed_fields(self, database, collection):
        task_id = ObjectId()
        collection.find_one_and_update = AsyncMock(
            return_value={"_id": task_id, "title": "Renamed", "id_user": OWNER}
        )

        task = await TaskRepository(database).update(str(task_id), {"title": "Renamed"})

        args = collection.find_one_and_update.call_args.args
        assert args[0] == {"_id": task_id}
        assert args[1] == {"$set": {"title": "Renamed"}}
        assert task.title == "Renamed"

    async def test_update_missing_returns_none(self, database, collection):
        collection.find_one_and_update = AsyncMock(return_value=None)

        assert await TaskRepository(database).update(str(ObjectId()), {"title": "x"}) is None

    async def test_delete(self, database, collection):
        collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))

        assert await TaskRepository(database).delete(str(ObjectId())) is True

    async def test_delete_missing(self, database, collection):
        collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

        assert await TaskRepository(database).delete(str(ObjectId())) is False


@pytest.mark.asyncio
class TestUserRepository:
    """Lookup by mail and registration races."""

    async def test_get_by_mail_matches_legacy_field(self, database, collection):
        user_id = ObjectId()
        collection.find_one = AsyncMock(return_value={"_id": user_id, "email": "a@b.com"})

        user = await UserRepository(database).get_by_mail("a@b.com")

        assert collection.find_one.call_args.args[0] == {
            "$or": [{"mail": "a@b.com"}, {"email": "a@b.com"}]
        }
        assert user.id == str(user_id)
        assert user.mail == "a@b.com"

    async def test_duplicate_insert_is_conflict(self, database, collection):
        """The unique index on mail surfaces as ConflictError."""
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000", code=11000))

        with pytest.raises(ConflictError):
            await UserRepository(database).create(user_factory.from_create("a@b.com"))

    async def test_create_returns_storage_id(self, database, collection):
        inserted_id = ObjectId()
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted_id))

        user = await UserRepository(database).create(user_factory.from_create("a@b.com"))

        assert user.id == str(inserted_id)
        assert collection.insert_one.call_args.args[0]["mail"] == "a@b.com"
