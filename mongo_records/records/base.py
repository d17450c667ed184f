"""
Record base classes.

Records are dataclasses. Each record class maps to one collection, named
after the class unless it sets ``__collection__``.

Example:
    @dataclass
    class User(TimestampedRecord):
        email: str
        name: str = ""

    @dataclass
    class Session(Record):
        id_codec = HexIdCodec()
        __collection__ = "sessions"

        user_id: str
"""

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, TypeVar

from bson import ObjectId

from ..constants import COLLECTION_ATTR, DOCUMENT_ID_FIELD, ID_FIELD
from ..exceptions import InvalidArgumentError, TypeMismatchError
from .identifiers import IdCodec, ObjectIdCodec

R = TypeVar("R", bound="Record")


@dataclass(kw_only=True)
class Record:
    """
    Base class for persisted records.

    Field values must be BSON encodable (str, int, float, bool, datetime,
    ObjectId, lists and dicts of those). The ``id`` field is stored as
    ``_id``; its Python representation is chosen by ``id_codec``.
    """

    id_codec: ClassVar[IdCodec] = ObjectIdCodec()

    id: ObjectId | str | None = None

    def to_document(self) -> dict[str, Any]:
        """Convert the record to a document for storage."""
        doc: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name == ID_FIELD:
                if value is not None:
                    doc[DOCUMENT_ID_FIELD] = self.id_codec.to_bson(value)
            else:
                doc[f.name] = value
        return doc

    @classmethod
    def from_document(cls: type[R], doc: dict[str, Any]) -> R:
        """
        Create a record from a stored document.

        Keys that are not fields of the record class are ignored.

        Raises:
            TypeMismatchError: If the document lacks a required field
        """
        data = dict(doc)
        if DOCUMENT_ID_FIELD in data:
            data[ID_FIELD] = cls.id_codec.from_bson(data.pop(DOCUMENT_ID_FIELD))

        field_names = {f.name for f in dataclasses.fields(cls) if f.init}
        try:
            return cls(**{k: v for k, v in data.items() if k in field_names})
        except TypeError as e:
            raise TypeMismatchError(
                f"Document does not match {cls.__name__}: {e}",
                context={"collection": collection_name(cls)},
            ) from e


@dataclass(kw_only=True)
class TimestampedRecord(Record):
    """
    Record with creation and modification times.

    ``created_at`` is set on insert; ``updated_at`` on insert and every update.
    Both are timezone-aware UTC datetimes with millisecond precision, which is
    what MongoDB stores.
    """

    created_at: datetime | None = None
    updated_at: datetime | None = None


def record_type(target: Any) -> type[Record]:
    """
    Resolve the record class of a record instance or class.

    Raises:
        InvalidArgumentError: If ``target`` is neither
    """
    cls = target if isinstance(target, type) else type(target)
    if not (dataclasses.is_dataclass(cls) and issubclass(cls, Record)):
        raise InvalidArgumentError(
            f"Expected a Record subclass or instance, got {cls.__name__}",
            context={"received": cls.__name__},
        )
    return cls


def collection_name(target: Any) -> str:
    """Collection name for a record instance or class."""
    cls = record_type(target)
    return cls.__dict__.get(COLLECTION_ATTR) or cls.__name__
