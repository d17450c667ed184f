"""
Abstract Repository Pattern

Defines the repository interface for one record type, plus an in-memory
implementation with the same contract for tests of consuming code.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from bson import ObjectId

from ..constants import DOCUMENT_ID_FIELD, ID_FIELD
from ..exceptions import InvalidArgumentError, NotFoundError, StorageError
from ..records import (
    IdCodec,
    Record,
    collection_name,
    ensure_record,
    prepare_insert,
    prepare_update,
    record_type,
    resolve_id,
)

T = TypeVar("T", bound=Record)


def build_filter(record_class: type[Record], filter: dict[str, Any] | None) -> dict[str, Any]:
    """
    Translate a record-level filter to a stored-document filter.

    A top-level ``"id"`` key becomes ``"_id"``. Identifier values under it
    (ObjectIds and hex strings, alone, in lists or inside operator documents
    such as ``{"$in": [...]}``) are converted to ObjectIds; operator
    arguments like ``True`` or ``None`` in ``{"$exists": True}`` are kept.
    Every other key is passed through unchanged.
    """
    if not filter:
        return {}

    query = dict(filter)
    if ID_FIELD in query:
        query[DOCUMENT_ID_FIELD] = _parse_id_clause(record_class, query.pop(ID_FIELD))
    return query


def _parse_id_clause(record_class: type[Record], clause: Any) -> Any:
    codec = record_class.id_codec
    if isinstance(clause, dict):
        return _parse_id_operand(codec, clause)
    return codec.parse(clause)


def _parse_id_operand(codec: IdCodec, value: Any) -> Any:
    if isinstance(value, (ObjectId, str)):
        return codec.parse(value)
    if isinstance(value, list):
        return [_parse_id_operand(codec, v) for v in value]
    if isinstance(value, dict):
        return {op: _parse_id_operand(codec, v) for op, v in value.items()}
    return value


class Repository(ABC, Generic[T]):
    """
    Abstract repository interface for one record type.

    Lookups that must return exactly one record (``get``, ``find_one``)
    and writes that target an existing record (``update``, ``delete``) raise
    NotFoundError when nothing matches.

    Example:
        class UserRepository(MongoRepository[User]):
            async def find_by_email(self, email: str) -> User:
                return await self.find_one({"email": email})
    """

    def __init__(self, record_class: type[T]):
        self._record_class = record_type(record_class)
        self.collection_name = collection_name(record_class)

    @property
    def record_class(self) -> type[T]:
        return self._record_class

    def _check_record(self, record: Any) -> T:
        record = ensure_record(record)
        if not isinstance(record, self._record_class):
            raise InvalidArgumentError(
                f"{type(self).__name__} for {self._record_class.__name__} "
                f"cannot store {type(record).__name__}",
                context={"collection": self.collection_name},
            )
        return record

    @abstractmethod
    async def insert(self, record: T) -> Any:
        """
        Insert a new record.

        The record gets an id if it has none, and its timestamps are set.

        Returns:
            The record's id
        """

    async def insert_many(self, records: Iterable[T]) -> list[Any]:
        """
        Insert records one after another.

        Every record is type checked before the first write. The first
        storage failure stops the batch; records after it are not attempted.

        Returns:
            The ids of the inserted records
        """
        records = [self._check_record(r) for r in records]
        return [await self.insert(record) for record in records]

    @abstractmethod
    async def get(self, id: Any) -> T:
        """
        Get a single record by id.

        Args:
            id: ObjectId or its hex string

        Raises:
            NotFoundError: If no record has this id
            InvalidArgumentError: If ``id`` is not a valid identifier
        """

    @abstractmethod
    async def find(
        self,
        filter: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int = 0,
        sort: list[tuple] | None = None,
    ) -> list[T]:
        """
        Find records matching a filter.

        Args:
            filter: MongoDB-style filter dictionary
            skip: Number of documents to skip
            limit: Maximum documents to return (0 means no limit)
            sort: List of (field, direction) tuples

        Returns:
            List of matching records
        """

    @abstractmethod
    async def find_one(self, filter: dict[str, Any] | None = None) -> T:
        """
        Find the first record matching a filter.

        Raises:
            NotFoundError: If nothing matches
        """

    @abstractmethod
    async def update(self, record: T) -> None:
        """
        Replace the stored record that has this record's id.

        Refreshes ``updated_at`` on timestamped records.

        Raises:
            NotFoundError: If no stored record has this id
        """

    @abstractmethod
    async def delete(self, record: T) -> None:
        """
        Delete the stored record that has this record's id.

        Raises:
            NotFoundError: If no stored record has this id
        """

    @abstractmethod
    async def count(self, filter: dict[str, Any] | None = None) -> int:
        """Count records matching a filter (all records when None)."""

    @abstractmethod
    async def exists(self, id: Any) -> bool:
        """Check if a record with this id exists."""


class InMemoryRepository(Repository[T]):
    """
    In-memory repository implementation for testing.

    Stores documents in a dictionary keyed by ObjectId. Filters only support
    top-level equality; query operators raise InvalidArgumentError. Inserting
    an id that is already stored raises StorageError, as a unique index would.
    """

    def __init__(self, record_class: type[T]):
        super().__init__(record_class)
        self._storage: dict[ObjectId, dict[str, Any]] = {}

    async def insert(self, record: T) -> Any:
        record = self._check_record(record)
        prepare_insert(record)
        doc = record.to_document()
        if doc[DOCUMENT_ID_FIELD] in self._storage:
            raise StorageError(
                f"insert on {self.collection_name} failed: duplicate id {record.id}",
                operation="insert",
                collection=self.collection_name,
            )
        self._storage[doc[DOCUMENT_ID_FIELD]] = copy.deepcopy(doc)
        return record.id

    async def get(self, id: Any) -> T:
        object_id = self._record_class.id_codec.parse(id)
        doc = self._storage.get(object_id)
        if doc is None:
            raise NotFoundError(
                f"{self._record_class.__name__} not found",
                collection=self.collection_name,
                record_id=str(object_id),
            )
        return self._record_class.from_document(copy.deepcopy(doc))

    async def find(
        self,
        filter: dict[str, Any] | None = None,
        skip: int = 0,
        limit: int = 0,
        sort: list[tuple] | None = None,
    ) -> list[T]:
        query = build_filter(self._record_class, filter)
        self._check_filter(query)
        docs = [d for d in self._storage.values() if self._matches_filter(d, query)]

        for key, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(key), reverse=direction < 0)

        docs = docs[skip:]
        if limit > 0:
            docs = docs[:limit]
        return [self._record_class.from_document(copy.deepcopy(d)) for d in docs]

    async def find_one(self, filter: dict[str, Any] | None = None) -> T:
        results = await self.find(filter, limit=1)
        if not results:
            raise NotFoundError(
                f"No {self._record_class.__name__} matches the filter",
                collection=self.collection_name,
            )
        return results[0]

    async def update(self, record: T) -> None:
        record = self._check_record(record)
        object_id = resolve_id(record)
        if object_id not in self._storage:
            raise NotFoundError(
                f"{self._record_class.__name__} not found",
                collection=self.collection_name,
                record_id=str(object_id),
            )
        prepare_update(record)
        self._storage[object_id] = copy.deepcopy(record.to_document())

    async def delete(self, record: T) -> None:
        record = self._check_record(record)
        object_id = resolve_id(record)
        if self._storage.pop(object_id, None) is None:
            raise NotFoundError(
                f"{self._record_class.__name__} not found",
                collection=self.collection_name,
                record_id=str(object_id),
            )

    async def count(self, filter: dict[str, Any] | None = None) -> int:
        if not filter:
            return len(self._storage)
        return len(await self.find(filter))

    async def exists(self, id: Any) -> bool:
        return self._record_class.id_codec.parse(id) in self._storage

    def _check_filter(self, filter: dict[str, Any]) -> None:
        for key, value in filter.items():
            if key.startswith("$") or (
                isinstance(value, dict) and any(op.startswith("$") for op in value)
            ):
                raise InvalidArgumentError(
                    f"{type(self).__name__} only supports equality filters, got {key!r}",
                    context={"collection": self.collection_name},
                )

    def _matches_filter(self, data: dict[str, Any], filter: dict[str, Any]) -> bool:
        return all(key in data and data[key] == value for key, value in filter.items())

    def clear(self) -> None:
        """Clear all records (useful for test setup)."""
        self._storage.clear()
