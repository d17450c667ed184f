"""
Custom exceptions for MONGO_RECORDS.

Every error raised by the record layer derives from MongoRecordsError, which
is a RuntimeError carrying an optional context dictionary.
"""

from typing import Any


class MongoRecordsError(RuntimeError):
    """
    Base exception for record layer errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection,
                 record_type, record_id, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class InvalidArgumentError(MongoRecordsError, TypeError):
    """
    Raised when an operation receives something it cannot work with.

    Examples are passing a plain dict or a class where a record instance is
    expected, or an identifier string that is not a valid ObjectId.
    """


class TypeMismatchError(InvalidArgumentError):
    """
    Raised when a record field holds a value of the wrong type.

    Attributes:
        field: Name of the offending field
        expected: Description of the accepted type(s)
        received: Type name of the value found
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        received: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if field:
            context["field"] = field
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received
        super().__init__(message, context=context)
        self.field = field
        self.expected = expected
        self.received = received


class DatabaseConnectionError(MongoRecordsError):
    """
    Raised when the driver cannot dial the configured servers.

    Attributes:
        servers: Server address(es) that were dialed (if available)
        db_name: Database name (if available)
    """

    def __init__(
        self,
        message: str,
        servers: str | None = None,
        db_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if servers:
            context["servers"] = servers
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.servers = servers
        self.db_name = db_name


class StorageError(MongoRecordsError):
    """
    Raised when the driver reports a failure while reading or writing records.

    The original driver exception is always chained as __cause__.

    Attributes:
        operation: Record operation that failed (insert, find, ...)
        collection: Collection the operation targeted
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        collection: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection:
            context["collection"] = collection
        super().__init__(message, context=context)
        self.operation = operation
        self.collection = collection


class NotFoundError(MongoRecordsError, LookupError):
    """
    Raised when no document matches a single-record lookup, update or delete.

    Attributes:
        collection: Collection that was searched
        record_id: Identifier that was looked up (if the lookup was by id)
    """

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        record_id: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if collection:
            context["collection"] = collection
        if record_id is not None:
            context["record_id"] = record_id
        super().__init__(message, context=context)
        self.collection = collection
        self.record_id = record_id


class ConfigurationError(MongoRecordsError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        config_value: Any | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
