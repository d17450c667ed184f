"""
MONGO_RECORDS - generic records on MongoDB

Insert, find, update, delete and count dataclass records without writing
per-type data access code. Connection handling, pooling and the wire
protocol are left to Motor.
"""

from .config import StoreConfig
from .database import Connection
from .exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    InvalidArgumentError,
    MongoRecordsError,
    NotFoundError,
    StorageError,
    TypeMismatchError,
)
from .records import HexIdCodec, IdCodec, ObjectIdCodec, Record, TimestampedRecord
from .repositories import InMemoryRepository, MongoRepository, RecordStore, Repository

__version__ = "0.1.0"

__all__ = [
    # Connection
    "Connection",
    "StoreConfig",
    # Records
    "Record",
    "TimestampedRecord",
    "IdCodec",
    "ObjectIdCodec",
    "HexIdCodec",
    # Repositories
    "Repository",
    "InMemoryRepository",
    "MongoRepository",
    "RecordStore",
    # Errors
    "MongoRecordsError",
    "InvalidArgumentError",
    "TypeMismatchError",
    "DatabaseConnectionError",
    "StorageError",
    "NotFoundError",
    "ConfigurationError",
]
