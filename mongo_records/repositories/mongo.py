"""
MongoDB Repository Implementation

Implements the Repository interface on top of a Connection. Every method
borrows one driver session, performs a single driver call and releases the
session, whatever the outcome.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from ..constants import DOCUMENT_ID_FIELD
from ..database.connection import Connection
from ..exceptions import NotFoundError, StorageError
from ..observability import get_logger as get_contextual_logger
from ..observability import (
    clear_record_context,
    log_operation,
    record_operation,
    set_record_context,
)
from ..records import Record, prepare_insert, prepare_update, resolve_id
from .base import Repository, build_filter

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

T = TypeVar("T", bound=Record)


class MongoRepository(Repository[T], Generic[T]):
    """
    MongoDB implementation of the Repository interface.

    The collection is derived from the record class.

    Example:
        users = MongoRepository(connection, User)

        user = User(email="john@example.com", name="John")
        await users.insert(user)

        admins = await users.find({"role": "admin"})
    """

    def __init__(self, connection: Connection, record_class: type[T]):
        """
        Initialize the MongoDB repository.

        Args:
            connection: Connection the records are stored through
            record_class: Record subclass for this repository
        """
        super().__init__(record_class)
        self._connection = connection

    def _collection(self) -> AsyncIOMotorCollection:
        return self._connection.collection(self.collection_name)

    @asynccontextmanager
    async def _session(self, operation: str, **context: Any) -> AsyncIterator[
        AsyncIOMotorClientSession
    ]:
        """
        Run one driver call inside a session, timing it and translating driver errors.

        The collection and operation are set as record context for every log
        line emitted while the call runs.
        """
        token = set_record_context(
            collection=self.collection_name, operation=f"records.{operation}", **context
        )
        start_time = time.time()
        success = False
        try:
            async with self._connection.session() as session:
                yield session
            success = True
        except (PyMongoError, BSONError) as e:
            raise StorageError(
                f"{operation} on {self.collection_name} failed: {e}",
                operation=operation,
                collection=self.collection_name,
                context={"error_type": type(e).__name__},
            ) from e
        finally:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                f"records.{operation}", duration_ms, success, collection=self.collection_name
            )
            log_operation(
                contextual_logger,
                f"records.{operation}",
                level=logging.DEBUG if success else logging.WARNING,
                success=success,
                duration_ms=duration_ms,
            )
            clear_record_context(token)

    def _not_found(self, record_id: Any = None) -> NotFoundError:
        if record_id is None:
            message = f"No {self._record_class.__name__} matches the filter"
        else:
            message = f"{self._record_class.__name__} not found"
            record_id = str(record_id)
        return NotFoundError(message, collection=self.collection_name, record_id=record_id)

    async def insert(self, record: T) -> Any:
        """Insert a record and return its id."""
        record = self._check_record(record)
        prepare_insert(record)
        doc = record.to_document()

        async with self._session("insert", record_id=str(record.id)) as session:
            await self._collection().insert_one(doc, session=session)

        return record.id

    async def get(self, id: Any) -> T:
        """Get a record by id."""
        object_id = self._record_class.id_codec.parse(id)

        async with self._session("get", record_id=str(object_id)) as session:
            doc = await self._collection().find_one(
                {DOCUMENT_ID_FIELD: object_id}, session=session
            )

        if doc is None:
            raise self._not_found(object_id)
        return self._record_class.from_document(doc)

    async def find(
        self,
        filter: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int = 0,
        sort: list[tuple] | None = None,
    ) -> list[T]:
        """Find records matching a filter."""
        query = build_filter(self._record_class, filter)

        async with self._session("find") as session:
            cursor = self._collection().find(query, session=session)
            if sort:
                cursor = cursor.sort(sort)
            if skip > 0:
                cursor = cursor.skip(skip)
            if limit > 0:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)

        return [self._record_class.from_document(doc) for doc in docs]

    async def find_one(self, filter: dict[str, Any] | None = None) -> T:
        """Find the first record matching a filter."""
        query = build_filter(self._record_class, filter)

        async with self._session("find_one") as session:
            doc = await self._collection().find_one(query, session=session)

        if doc is None:
            raise self._not_found()
        return self._record_class.from_document(doc)

    async def update(self, record: T) -> None:
        """Replace the stored document with the record's full representation."""
        record = self._check_record(record)
        object_id = resolve_id(record)
        prepare_update(record)

        doc = record.to_document()
        doc.pop(DOCUMENT_ID_FIELD, None)

        async with self._session("update", record_id=str(object_id)) as session:
            result = await self._collection().replace_one(
                {DOCUMENT_ID_FIELD: object_id}, doc, session=session
            )

        if result.matched_count == 0:
            raise self._not_found(object_id)

    async def delete(self, record: T) -> None:
        """Delete the stored document with the record's id."""
        record = self._check_record(record)
        object_id = resolve_id(record)

        async with self._session("delete", record_id=str(object_id)) as session:
            result = await self._collection().delete_one(
                {DOCUMENT_ID_FIELD: object_id}, session=session
            )

        if result.deleted_count == 0:
            raise self._not_found(object_id)

    async def count(self, filter: dict[str, Any] | None = None) -> int:
        """Count records matching a filter."""
        query = build_filter(self._record_class, filter)

        async with self._session("count") as session:
            return await self._collection().count_documents(query, session=session)

    async def exists(self, id: Any) -> bool:
        """Check if a record with this id exists."""
        object_id = self._record_class.id_codec.parse(id)

        async with self._session("exists", record_id=str(object_id)) as session:
            doc = await self._collection().find_one(
                {DOCUMENT_ID_FIELD: object_id},
                projection={DOCUMENT_ID_FIELD: 1},
                session=session,
            )
        return doc is not None
