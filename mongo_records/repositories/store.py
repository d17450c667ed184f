"""
Record Store

Generic insert / find / update / delete / count for any record type. The
store resolves the collection from the record's class and delegates to a
MongoRepository, created lazily and cached per record class.
"""

import logging
from typing import Any, TypeVar

from ..database.connection import Connection
from ..records import Record, ensure_record, record_type
from .mongo import MongoRepository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class RecordStore:
    """
    CRUD façade over every record type.

    Usage:
        connection = Connection()
        await connection.configure("localhost", "my_db")
        store = RecordStore(connection)

        await store.insert(User(email="a@example.com"), User(email="b@example.com"))
        user = await store.find_by_id(User, some_id)
        user.name = "Ann"
        await store.update(user)
        await store.delete(user)
        total = await store.count(User)
    """

    def __init__(self, connection: Connection):
        """
        Initialize the store.

        Args:
            connection: Connection the records are stored through
        """
        self._connection = connection
        self._repositories: dict[type[Record], MongoRepository] = {}

    @property
    def connection(self) -> Connection:
        return self._connection

    def repository(self, record_class: type[T]) -> MongoRepository[T]:
        """
        Get the repository bound to ``record_class``.

        Raises:
            InvalidArgumentError: If ``record_class`` is not a Record subclass
        """
        record_class = record_type(record_class)
        repo = self._repositories.get(record_class)
        if repo is None:
            repo = MongoRepository(self._connection, record_class)
            self._repositories[record_class] = repo
            logger.debug(
                f"Created repository for {record_class.__name__} "
                f"(collection={repo.collection_name})"
            )
        return repo

    async def insert(self, *records: Record) -> list[Any]:
        """
        Insert one or more records, in order.

        Every argument is checked before anything is written, so a non-record
        argument raises InvalidArgumentError with no storage write. A storage
        failure stops the call; records after the failing one are not
        attempted and records before it stay inserted.

        Returns:
            The ids of the inserted records
        """
        records = tuple(ensure_record(r) for r in records)
        return [await self.repository(type(r)).insert(r) for r in records]

    async def find(self, record_class: type[T], filter: dict[str, Any] | None = None) -> list[T]:
        """All records of ``record_class`` matching ``filter``."""
        return await self.repository(record_class).find(filter)

    async def find_one(self, record_class: type[T], filter: dict[str, Any] | None = None) -> T:
        """
        The first record of ``record_class`` matching ``filter``.

        Raises:
            NotFoundError: If nothing matches
        """
        return await self.repository(record_class).find_one(filter)

    async def find_by_id(self, record_class: type[T], id: Any) -> T:
        """
        The record of ``record_class`` with this id (ObjectId or hex string).

        Raises:
            NotFoundError: If no record has this id
            InvalidArgumentError: If ``id`` is not a valid identifier
        """
        return await self.find_one(record_class, {"id": id})

    async def update(self, record: Record) -> None:
        """Replace the stored copy of ``record``, refreshing ``updated_at``."""
        record = ensure_record(record)
        await self.repository(type(record)).update(record)

    async def delete(self, record: Record) -> None:
        """Delete the stored copy of ``record``."""
        record = ensure_record(record)
        await self.repository(type(record)).delete(record)

    async def count(self, target: type[Record] | Record) -> int:
        """Number of stored records of the type of ``target`` (a class or an instance)."""
        return await self.repository(record_type(target)).count()
