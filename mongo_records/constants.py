"""
Constants for MONGO_RECORDS.

This module contains the shared defaults used across the codebase to avoid
magic numbers in the connection and record layers.
"""

from typing import Final

# ============================================================================
# CONNECTION CONSTANTS
# ============================================================================

DEFAULT_SERVERS: Final[str] = "localhost"
"""Server address used when neither an argument nor MONGO_URI is given."""

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 1
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

APP_NAME: Final[str] = "MONGO_RECORDS"
"""Application name reported to the server in the connection handshake."""

MONGO_URI_SCHEMES: Final[tuple[str, ...]] = ("mongodb://", "mongodb+srv://")
"""URI prefixes accepted as-is by the driver."""

# ============================================================================
# RECORD CONSTANTS
# ============================================================================

ID_FIELD: Final[str] = "id"
"""Name of the identifier attribute on record classes."""

DOCUMENT_ID_FIELD: Final[str] = "_id"
"""Name of the identifier key in stored documents."""

CREATED_AT_FIELD: Final[str] = "created_at"
"""Timestamp set once, when a record is inserted."""

UPDATED_AT_FIELD: Final[str] = "updated_at"
"""Timestamp refreshed on every insert and update."""

COLLECTION_ATTR: Final[str] = "__collection__"
"""Class attribute that overrides the collection name derived from a record type."""

# ============================================================================
# METRICS CONSTANTS
# ============================================================================

MAX_METRICS: Final[int] = 10000
"""Maximum number of distinct metric keys kept before LRU eviction."""
