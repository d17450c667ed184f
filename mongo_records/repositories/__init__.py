"""
MONGO_RECORDS Repository Pattern

Typed repositories bound to one record class, and the RecordStore façade that
serves any record class.

Usage:
    from mongo_records.repositories import MongoRepository, RecordStore

    # Typed access to one record type
    users = MongoRepository(connection, User)
    user = await users.get(user_id)

    # Generic access to every record type
    store = RecordStore(connection)
    await store.insert(user, order)
"""

from .base import InMemoryRepository, Repository, build_filter
from .mongo import MongoRepository
from .store import RecordStore

__all__ = [
    "Repository",
    "InMemoryRepository",
    "MongoRepository",
    "RecordStore",
    "build_filter",
]
