"""
Connection management for MONGO_RECORDS.

A Connection owns one Motor client and the name of the database that records
live in. It is constructed by the caller and handed to stores and
repositories explicitly; there is no process-wide handle.

Every record operation borrows a driver session through ``session()``, which
ends the session on every path, including errors.

Usage:
    connection = Connection()
    await connection.configure("localhost", "my_db")

    async with connection.session() as session:
        coll = connection.collection("User")
        await coll.insert_one({"name": "john"}, session=session)

    await connection.close()
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import PyMongoError

from ..config import StoreConfig
from ..constants import (
    APP_NAME,
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    MONGO_URI_SCHEMES,
)
from ..exceptions import ConfigurationError, DatabaseConnectionError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation, timed_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


def build_mongo_uri(servers: str | Sequence[str]) -> str:
    """
    Turn a server specification into a MongoDB connection URI.

    Accepts a full ``mongodb://`` / ``mongodb+srv://`` URI, a comma separated
    host list such as ``"a:27017,b:27017"``, or a sequence of hosts.

    Raises:
        ConfigurationError: If no server is given
    """
    if isinstance(servers, str):
        servers = servers.strip()
        if servers.startswith(MONGO_URI_SCHEMES):
            return servers
        hosts = [h.strip() for h in servers.split(",")]
    else:
        hosts = [str(h).strip() for h in servers]

    hosts = [h for h in hosts if h]
    if not hosts:
        raise ConfigurationError("At least one server address is required", config_key="servers")
    return "mongodb://" + ",".join(hosts)


class Connection:
    """
    Caller-owned MongoDB connection holder.

    The client is created lazily: it is dialed by ``configure()`` or, if that
    was never called, on the first ``session()``.
    """

    def __init__(
        self,
        servers: str | Sequence[str] | None = None,
        db_name: str | None = None,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
        server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    ) -> None:
        """
        Initialize the connection holder without dialing.

        Args:
            servers: MongoDB URI or host list
            db_name: Database name
            max_pool_size: Maximum MongoDB connection pool size
            min_pool_size: Minimum MongoDB connection pool size
            server_selection_timeout_ms: How long the driver waits for a reachable server
        """
        self.servers = servers
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.min_pool_size = min_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms

        self._client: AsyncIOMotorClient | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: StoreConfig) -> "Connection":
        """Build a connection from a validated StoreConfig."""
        config.validate()
        return cls(
            servers=config.servers,
            db_name=config.db_name,
            max_pool_size=config.max_pool_size,
            min_pool_size=config.min_pool_size,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
        )

    async def configure(self, servers: str | Sequence[str], db_name: str) -> None:
        """
        Dial ``servers`` and make them the backing store for ``db_name``.

        Replaces any previously configured client. The old client is closed
        only once the new one answered a ping, so a failed reconfigure leaves
        the connection as it was.

        Args:
            servers: MongoDB URI or host list
            db_name: Database name

        Raises:
            DatabaseConnectionError: If the servers cannot be reached
            ConfigurationError: If servers or db_name are empty
        """
        if not db_name:
            raise ConfigurationError("db_name is required", config_key="db_name")

        async with self._lock:
            client = await self._dial(servers, db_name)
            previous = self._client
            self._client = client
            self.servers = servers
            self.db_name = db_name

        if previous is not None and previous is not client:
            previous.close()
            logger.debug("Closed previous MongoDB client after reconfigure")

    async def _dial(self, servers: str | Sequence[str], db_name: str) -> AsyncIOMotorClient:
        start_time = time.time()
        uri = build_mongo_uri(servers)

        contextual_logger.info(
            "Connecting to MongoDB",
            extra={
                "db_name": db_name,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

        client = None
        try:
            client = AsyncIOMotorClient(
                uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                appname=APP_NAME,
                maxPoolSize=self.max_pool_size,
                minPoolSize=self.min_pool_size,
                maxIdleTimeMS=DEFAULT_MAX_IDLE_TIME_MS,
                tz_aware=True,
            )
            await client.admin.command("ping")
        except (PyMongoError, ValueError, TypeError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.configure", duration_ms, success=False)
            contextual_logger.error(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
            )
            if client is not None:
                client.close()
            raise DatabaseConnectionError(
                f"Failed to connect to MongoDB: {e}",
                servers=str(servers),
                db_name=db_name,
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.configure", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection established",
            extra={
                "db_name": db_name,
                "pool_size": f"{self.min_pool_size}-{self.max_pool_size}",
                "duration_ms": round(duration_ms, 2),
            },
        )
        return client

    async def get_client(self) -> AsyncIOMotorClient:
        """
        Return the Motor client, dialing the configured servers on first use.

        Raises:
            DatabaseConnectionError: If the servers cannot be reached
            ConfigurationError: If no servers or database were ever given
        """
        if self._client is not None:
            return self._client

        if not self.servers or not self.db_name:
            raise ConfigurationError(
                "Connection not configured. Call configure(servers, db_name) first."
            )

        async with self._lock:
            # another task may have dialed while we waited
            if self._client is None:
                self._client = await self._dial(self.servers, self.db_name)
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        The configured database.

        Raises:
            RuntimeError: If no client has been dialed yet
        """
        if self._client is None:
            raise RuntimeError("Connection not initialized. Call configure() first.")
        return self._client[self.db_name]

    def collection(self, name: str) -> AsyncIOMotorCollection:
        """
        Get a collection handle in the configured database.

        The handle is bound to the shared client; pass a session from
        ``session()`` to its methods.
        """
        return self.database[name]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncIOMotorClientSession]:
        """
        Borrow a driver session for a single operation.

        The session is ended when the block exits, whether or not it raised.
        """
        client = await self.get_client()
        async with await client.start_session() as session:
            yield session

    @property
    def initialized(self) -> bool:
        """Check whether a client has been dialed."""
        return self._client is not None

    @timed_operation("connection.close")
    async def close(self) -> None:
        """
        Close the client and release its pool.

        Safe to call more than once. A later ``session()`` dials again.
        """
        async with self._lock:
            client, self._client = self._client, None

        if client is not None:
            client.close()
            contextual_logger.info("MongoDB connection closed", extra={"db_name": self.db_name})
