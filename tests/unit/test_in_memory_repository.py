"""
Unit tests for InMemoryRepository.

The in-memory repository follows the same contract as MongoRepository, so
these tests double as a description of that contract.
"""

from dataclasses import dataclass

import pytest
from bson import ObjectId

from mongo_records.exceptions import InvalidArgumentError, NotFoundError, StorageError
from mongo_records.records import TimestampedRecord
from mongo_records.repositories import InMemoryRepository


@dataclass
class User(TimestampedRecord):
    email: str = ""
    role: str = "user"


@pytest.fixture
def users():
    return InMemoryRepository(User)


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_insert_then_get_round_trip(self, users):
        user = User(email="a@example.com")
        await users.insert(user)

        stored = await users.get(user.id)

        assert stored == user
        assert stored is not user

    @pytest.mark.asyncio
    async def test_stored_copy_is_isolated(self, users):
        user = User(email="a@example.com")
        await users.insert(user)
        user.email = "changed@example.com"

        assert (await users.get(str(user.id))).email == "a@example.com"

    @pytest.mark.asyncio
    async def test_count_after_inserts(self, users):
        assert await users.count() == 0
        await users.insert_many([User(email=f"{i}@example.com") for i in range(3)])
        assert await users.count() == 3
        assert await users.count({"role": "user"}) == 3
        assert await users.count({"role": "admin"}) == 0

    @pytest.mark.asyncio
    async def test_find_with_sort_skip_limit(self, users):
        for email in ["c", "a", "b"]:
            await users.insert(User(email=email))

        found = await users.find(sort=[("email", 1)], skip=1, limit=1)

        assert [u.email for u in found] == ["b"]

    @pytest.mark.asyncio
    async def test_find_by_id_key(self, users):
        user = User(email="a")
        await users.insert(user)
        assert await users.find_one({"id": str(user.id)}) == user

    @pytest.mark.asyncio
    async def test_update_keeps_created_at(self, users):
        user = User(email="a")
        await users.insert(user)
        created = user.created_at

        user.role = "admin"
        await users.update(user)

        stored = await users.get(user.id)
        assert stored.role == "admin"
        assert stored.created_at == created
        assert stored.updated_at >= created

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, users):
        user = User(email="a")
        await users.insert(user)
        await users.delete(user)

        with pytest.raises(NotFoundError):
            await users.get(user.id)
        assert await users.exists(user.id) is False

    @pytest.mark.asyncio
    async def test_update_and_delete_missing(self, users):
        ghost = User(id=ObjectId())
        with pytest.raises(NotFoundError):
            await users.update(ghost)
        with pytest.raises(NotFoundError):
            await users.delete(ghost)

    @pytest.mark.asyncio
    async def test_insert_duplicate_id(self, users):
        oid = ObjectId()
        await users.insert(User(id=oid, email="a"))

        with pytest.raises(StorageError) as exc_info:
            await users.insert(User(id=oid, email="b"))

        assert exc_info.value.operation == "insert"
        assert exc_info.value.collection == "User"
        assert (await users.get(oid)).email == "a"
        assert await users.count() == 1

    @pytest.mark.asyncio
    async def test_operator_filters_rejected(self, users):
        user = User(email="a")
        await users.insert(user)

        with pytest.raises(InvalidArgumentError):
            await users.find({"id": {"$in": [user.id]}})
        with pytest.raises(InvalidArgumentError):
            await users.find({"email": {"$in": ["a"]}})
        with pytest.raises(InvalidArgumentError):
            await users.count({"$or": [{"email": "a"}]})

    @pytest.mark.asyncio
    async def test_operator_filters_rejected_when_empty(self, users):
        with pytest.raises(InvalidArgumentError):
            await users.find({"role": {"$ne": "admin"}})

    @pytest.mark.asyncio
    async def test_rejects_non_records(self, users):
        with pytest.raises(InvalidArgumentError):
            await users.insert({"email": "a"})

    @pytest.mark.asyncio
    async def test_clear(self, users):
        await users.insert(User(email="a"))
        users.clear()
        assert await users.count() == 0
