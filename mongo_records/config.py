"""
Configuration management for MONGO_RECORDS.

StoreConfig gathers the connection settings from direct parameters or the
environment. A Connection can always be built with direct parameters instead.
"""

import os

from .constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    DEFAULT_SERVERS,
)
from .exceptions import ConfigurationError


class StoreConfig:
    """
    Record store connection configuration.

    Example:
        # Using environment variables
        config = StoreConfig()
        connection = Connection.from_config(config)

        # Or using direct parameters
        connection = Connection(servers="localhost", db_name="my_db")
    """

    def __init__(
        self,
        servers: str | None = None,
        db_name: str | None = None,
        max_pool_size: int | None = None,
        min_pool_size: int | None = None,
        server_selection_timeout_ms: int | None = None,
    ):
        """
        Initialize configuration.

        Args:
            servers: MongoDB URI or host list (defaults to MONGO_URI env var, then localhost)
            db_name: Database name (defaults to DB_NAME env var)
            max_pool_size: Maximum connection pool size (defaults to 50 or MONGO_MAX_POOL_SIZE)
            min_pool_size: Minimum connection pool size (defaults to 1 or MONGO_MIN_POOL_SIZE)
            server_selection_timeout_ms: Server selection timeout in ms (defaults to 5000)
        """
        self.servers = servers or os.getenv("MONGO_URI", DEFAULT_SERVERS)
        self.db_name = db_name or os.getenv("DB_NAME", "")
        self.max_pool_size = max_pool_size or _env_int(
            "MONGO_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE
        )
        self.min_pool_size = min_pool_size or _env_int(
            "MONGO_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE
        )
        self.server_selection_timeout_ms = server_selection_timeout_ms or _env_int(
            "MONGO_SERVER_SELECTION_TIMEOUT_MS", DEFAULT_SERVER_SELECTION_TIMEOUT_MS
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.servers:
            raise ConfigurationError(
                "servers is required (set MONGO_URI environment variable or pass directly)",
                config_key="servers",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 0:
            raise ConfigurationError(
                f"min_pool_size must be >= 0, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < 1:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", config_key=name, config_value=raw
        ) from e
