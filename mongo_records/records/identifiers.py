"""
Identifier codecs.

A record class picks how its ``id`` attribute is represented in Python. In
both cases the stored ``_id`` is a BSON ObjectId:

- ObjectIdCodec: ``id`` is a ``bson.ObjectId``.
- HexIdCodec: ``id`` is the 24 character hex string of an ObjectId, which is
  handy when ids travel through URLs or JSON.
"""

from abc import ABC, abstractmethod
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from ..exceptions import InvalidArgumentError, TypeMismatchError


class IdCodec(ABC):
    """Converts a record's ``id`` attribute to and from the stored ``_id``."""

    #: Human readable name of the accepted Python type, used in errors.
    python_type: str = ""

    @abstractmethod
    def new(self) -> Any:
        """Generate a fresh identifier in the record's representation."""

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        """True if ``value`` has the right Python type for this codec."""

    @abstractmethod
    def is_valid(self, value: Any) -> bool:
        """True if ``value`` is a usable identifier."""

    @abstractmethod
    def to_bson(self, value: Any) -> ObjectId:
        """Convert a record ``id`` to the stored ``_id``."""

    @abstractmethod
    def from_bson(self, raw: Any) -> Any:
        """Convert a stored ``_id`` back to the record representation."""

    def check(self, value: Any, field: str = "id") -> None:
        """
        Raise TypeMismatchError unless ``value`` is None or an accepted type.
        """
        if value is not None and not self.accepts(value):
            raise TypeMismatchError(
                f"Unknown type in {field} field. Expected {self.python_type}. "
                f"Received: {type(value).__name__}",
                field=field,
                expected=self.python_type,
                received=type(value).__name__,
            )

    def parse(self, value: Any) -> ObjectId:
        """
        Convert a lookup value to an ObjectId for use in filters.

        Lookups are lenient: both ObjectId instances and hex strings are
        accepted regardless of the record's own representation.

        Raises:
            InvalidArgumentError: If ``value`` is not a valid identifier
        """
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str):
            try:
                return ObjectId(value)
            except InvalidId as e:
                raise InvalidArgumentError(
                    f"Invalid identifier: {value!r} is not a 24 character hex ObjectId",
                    context={"id": value},
                ) from e
        raise InvalidArgumentError(
            f"Invalid identifier type: {type(value).__name__}",
            context={"id": repr(value)},
        )


class ObjectIdCodec(IdCodec):
    """Identifiers held as native ``bson.ObjectId`` values."""

    python_type = "bson.ObjectId"

    def new(self) -> ObjectId:
        return ObjectId()

    def accepts(self, value: Any) -> bool:
        return isinstance(value, ObjectId)

    def is_valid(self, value: Any) -> bool:
        return isinstance(value, ObjectId)

    def to_bson(self, value: Any) -> ObjectId:
        self.check(value)
        if value is None:
            raise InvalidArgumentError("Record has no id")
        return value

    def from_bson(self, raw: Any) -> ObjectId:
        return raw


class HexIdCodec(IdCodec):
    """Identifiers held as hex strings, stored as ObjectId."""

    python_type = "str"

    def new(self) -> str:
        return str(ObjectId())

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)

    def is_valid(self, value: Any) -> bool:
        return isinstance(value, str) and ObjectId.is_valid(value)

    def to_bson(self, value: Any) -> ObjectId:
        self.check(value)
        if not value:
            raise InvalidArgumentError("Record has no id")
        return self.parse(value)

    def from_bson(self, raw: Any) -> str:
        return str(raw)
