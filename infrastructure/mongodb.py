# ============================================================================
# CLAUDE CONTEXT - MONGODB CONNECTION
# ============================================================================
# STATUS: Core Infrastructure - Document store connection management
# PURPOSE: MongoDB client lifecycle and live connectivity state for the APIs
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: MongoConnection, ConnectionState, get_mongo_connection
# DEPENDENCIES: pymongo, config, util_logger
# SCOPE: Read-only database access for API serving
# PATTERNS: Singleton connection, topology-driven state, lazy client
# ============================================================================

"""
MongoDB Connection - Read-Only Document Store Access

Provides one pooled MongoClient per process with:
- Pool size and timeouts from config (MONGO_MAX_POOL_SIZE etc.)
- A connectivity flag kept current by topology monitoring events, so request
  handlers can answer 503 without touching the network
- An explicit ping() for detailed health checks

The flag starts DISCONNECTED and flips to CONNECTED after the first
successful ping or once the topology has a readable server. It only
drops back when no member of the deployment can serve reads. Requests
arriving while it is DISCONNECTED see 503.

Usage:
    from infrastructure.mongodb import get_mongo_connection

    connection = get_mongo_connection()
    connection.connect()
    if connection.is_connected:
        features = connection.get_collection("features")
"""

import time
from enum import Enum
from typing import Any, Callable, Optional

from pymongo import MongoClient, monitoring
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError, PyMongoError

from config import get_app_config, mask_connection_string
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "MongoConnection")


class ConnectionState(str, Enum):
    """Connectivity as reported by /health."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class _TopologyStateListener(monitoring.TopologyListener):
    """
    Mirror topology readability onto a MongoConnection.

    The connection counts as connected while any server in the topology
    can serve reads, so one unreachable replica set member does not take
    the API down.
    """

    def __init__(self, connection: "MongoConnection"):
        self._connection = connection

    def opened(self, event):
        pass

    def description_changed(self, event):
        if event.new_description.has_readable_server():
            self._connection.mark_connected()
        else:
            logger.warning(f"MongoDB topology has no readable server ({event.new_description.topology_type_name})")
            self._connection.mark_disconnected()

    def closed(self, event):
        self._connection.mark_disconnected()


class MongoConnection:
    """
    MongoDB client wrapper with connectivity tracking.

    Connection Strategy:
    -------------------
    A single client is created per process and reused by every request.
    MongoClient keeps its own pool (maxPoolSize) and reconnects in the
    background, so a failed first connect recovers without a restart.

    Parameters:
    ----------
    uri : str
        MongoDB connection string
    database_name : str
        Database used when the URI names none
    client_factory : Callable
        MongoClient or a compatible stand-in
    **client_options
        Passed to the client (maxPoolSize, timeouts...)
    """

    def __init__(
        self,
        uri: str,
        database_name: str = "test",
        client_factory: Callable[..., Any] = MongoClient,
        **client_options: Any
    ):
        self.uri = uri
        self.database_name = database_name
        self._client_factory = client_factory
        self._client_options = client_options
        self._client: Optional[Any] = None
        self._state = ConnectionState.DISCONNECTED

    # ========================================================================
    # STATE
    # ========================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def mark_connected(self) -> None:
        if self._state != ConnectionState.CONNECTED:
            logger.info("✅ MongoDB connection state: connected")
        self._state = ConnectionState.CONNECTED

    def mark_disconnected(self) -> None:
        if self._state != ConnectionState.DISCONNECTED:
            logger.warning("⚠️ MongoDB connection state: disconnected")
        self._state = ConnectionState.DISCONNECTED

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def connect(self, raise_on_failure: bool = False) -> bool:
        """
        Create the client (once) and verify the server answers.

        Args:
            raise_on_failure: Re-raise connection errors instead of only logging

        Returns:
            True if the server answered a ping
        """
        try:
            if self._client is None:
                self._client = self._client_factory(
                    self.uri,
                    event_listeners=[_TopologyStateListener(self)],
                    **self._client_options
                )

            self.ping()
            logger.info(f"✅ Connected to MongoDB at {mask_connection_string(self.uri)}")
            return True

        except PyMongoError as e:
            self.mark_disconnected()
            logger.error(f"❌ MongoDB connection error: {e}")
            logger.error("Make sure MONGO_URI is set in environment variables")
            if raise_on_failure:
                raise
            return False

    def ping(self) -> float:
        """
        Round-trip a ping command.

        Returns:
            Latency in milliseconds

        Raises:
            PyMongoError: If the server cannot be reached
        """
        if self._client is None:
            raise ConfigurationError("MongoDB client has not been created - call connect() first")

        start_time = time.perf_counter()
        try:
            self._client.admin.command("ping")
        except PyMongoError:
            self.mark_disconnected()
            raise

        self.mark_connected()
        return (time.perf_counter() - start_time) * 1000

    def get_database(self):
        """
        Database named in the URI, or the configured fallback.

        Raises:
            ConfigurationError: If connect() has never created a client
        """
        if self._client is None:
            raise ConfigurationError("MongoDB client has not been created - call connect() first")
        return self._client.get_default_database(default=self.database_name)

    def get_collection(self, name: str) -> Collection:
        return self.get_database()[name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        self.mark_disconnected()


# ============================================================================
# Singleton
# ============================================================================

_connection: Optional[MongoConnection] = None


def get_mongo_connection() -> MongoConnection:
    """
    Get the process-wide MongoDB connection (client not yet created).

    Returns:
        MongoConnection configured from AppConfig
    """
    global _connection

    if _connection is None:
        config = get_app_config()
        _connection = MongoConnection(
            uri=config.mongo_uri,
            database_name=config.mongo_database,
            maxPoolSize=config.mongo_max_pool_size,
            serverSelectionTimeoutMS=config.mongo_server_selection_timeout_ms,
            socketTimeoutMS=config.mongo_socket_timeout_ms,
            connectTimeoutMS=config.mongo_connect_timeout_ms
        )

    return _connection
