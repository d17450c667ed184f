"""
Field injection for records about to be written.

Before an insert a record gets an identifier if it has none, and timestamped
records get ``created_at`` / ``updated_at``. Before an update only
``updated_at`` is refreshed.
"""

from datetime import datetime, timezone
from typing import Any

from ..constants import CREATED_AT_FIELD, ID_FIELD, UPDATED_AT_FIELD
from ..exceptions import InvalidArgumentError, TypeMismatchError
from .base import Record, TimestampedRecord


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision of BSON dates."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def ensure_record(value: Any) -> Record:
    """
    Return ``value`` if it is a record instance.

    Raises:
        InvalidArgumentError: For classes, dicts and anything else
    """
    if isinstance(value, type) or not isinstance(value, Record):
        received = value.__name__ if isinstance(value, type) else type(value).__name__
        raise InvalidArgumentError(
            f"You must pass in a record instance, got {received}",
            context={"received": received},
        )
    return value


def assign_id(record: Record) -> Any:
    """
    Give ``record`` a new identifier unless it already holds a valid one.

    Returns:
        The record's identifier

    Raises:
        TypeMismatchError: If the id holds a value of the wrong type
    """
    codec = record.id_codec
    codec.check(record.id, ID_FIELD)
    if not codec.is_valid(record.id):
        record.id = codec.new()
    return record.id


def _check_timestamp(record: Record, field: str) -> None:
    current = getattr(record, field)
    if current is not None and not isinstance(current, datetime):
        raise TypeMismatchError(
            f"{field} must be a datetime",
            field=field,
            expected="datetime",
            received=type(current).__name__,
        )


def set_timestamp(record: Record, field: str, now: datetime) -> None:
    """
    Set a timestamp field on a timestamped record; other records are left alone.

    Raises:
        TypeMismatchError: If the field currently holds something other than a datetime
    """
    if not isinstance(record, TimestampedRecord):
        return

    _check_timestamp(record, field)
    setattr(record, field, now)


def prepare_insert(record: Record) -> None:
    """
    Populate the identifier and both timestamps of a new record.

    Every field is type checked before any is assigned, so a rejected record
    is left as it was passed in.
    """
    if isinstance(record, TimestampedRecord):
        _check_timestamp(record, CREATED_AT_FIELD)
        _check_timestamp(record, UPDATED_AT_FIELD)
    assign_id(record)
    now = utc_now()
    set_timestamp(record, CREATED_AT_FIELD, now)
    set_timestamp(record, UPDATED_AT_FIELD, now)


def prepare_update(record: Record) -> None:
    """Refresh ``updated_at``; ``created_at`` is never touched."""
    set_timestamp(record, UPDATED_AT_FIELD, utc_now())


def resolve_id(record: Record) -> Any:
    """
    Stored ``_id`` value of an existing record.

    Raises:
        InvalidArgumentError: If the record has no id
        TypeMismatchError: If the id holds a value of the wrong type
    """
    if record.id is None or record.id == "":
        raise InvalidArgumentError(
            f"{type(record).__name__} has no id",
            context={"record_type": type(record).__name__},
        )
    return record.id_codec.to_bson(record.id)
