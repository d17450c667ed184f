"""
Record model.

Dataclass base records, identifier codecs and the field injection applied
before records are written.
"""

from .base import Record, TimestampedRecord, collection_name, record_type
from .fields import (
    assign_id,
    ensure_record,
    prepare_insert,
    prepare_update,
    resolve_id,
    set_timestamp,
    utc_now,
)
from .identifiers import HexIdCodec, IdCodec, ObjectIdCodec

__all__ = [
    # Records
    "Record",
    "TimestampedRecord",
    "collection_name",
    "record_type",
    # Identifiers
    "IdCodec",
    "ObjectIdCodec",
    "HexIdCodec",
    # Field injection
    "assign_id",
    "ensure_record",
    "prepare_insert",
    "prepare_update",
    "resolve_id",
    "set_timestamp",
    "utc_now",
]
