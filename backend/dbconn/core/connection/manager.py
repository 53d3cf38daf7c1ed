"""
Connection manager: named connection cache (NOT a pool).

One ConnectionAdapter per connection name, created lazily on first request
and reused until it is released or the configuration changes. There is no
size limit, idle eviction, health-check or rotation. Configuration comes
from the environment (``dbconn.core.config.Settings``) unless overridden
with ``set_config()``.
"""

import atexit
import logging
import threading
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from dbconn.core.config import load_settings
from dbconn.schemas import DatabaseConfig

from .adapter import ConnectionAdapter
from .connect import build_dsn, build_options, open_handle
from .errors import ErrorState
from .exceptions import DriverError

_log = logging.getLogger(__name__)

MANAGER_TYPE = "Connection Manager (simple caching, NOT pooling)"
MANAGER_ENVIRONMENT = "single process (WSGI worker / CLI)"
DEFAULT_CONNECTION_NAME = "default"


class ConnectionManager(ErrorState):
    """Named cache of ConnectionAdapters plus the configuration they are opened with.

    Use ``get_connection_manager()`` for the process-wide instance; constructing
    one directly gives an independent cache (useful for injection and tests).
    """

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionAdapter] = {}
        self._lock = threading.Lock()
        self._error = None
        self._initialized = False
        self._dev = False
        self._config = DatabaseConfig()
        self._dsn: str | None = None
        self._initialize()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _initialize(self) -> None:
        """Resolve configuration; on any failure record it and stay uninitialized."""
        try:
            settings = load_settings()
            self._dev = settings.is_dev
            self._config = settings.to_database_config()
            self._dsn = None
            self._initialized = True
        except Exception as e:
            self.set_error(f"Failed to initialize connection manager: {e}")
            self._config = DatabaseConfig()
            self._initialized = False
            _log.warning("Connection manager initialization failed: %s", e)
            return

        if self._dev:
            kind = "persistent" if self._config.persistent else "simple"
            _log.info("ConnectionManager: initialized (%s connections, %s)", kind, self._config.summary())

    def dispose(self) -> None:
        """Release every cached connection and empty the cache."""
        with self._lock:
            entries = list(self._connections.items())
            self._connections.clear()
        for name, adapter in entries:
            self._release_adapter(name, adapter)

    def is_initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def get_connection(self, name: str = DEFAULT_CONNECTION_NAME) -> ConnectionAdapter | None:
        """Return the cached adapter for *name*, opening a new connection on first use."""
        self.clear_error()

        with self._lock:
            cached = self._connections.get(name)
        if cached is not None:
            return cached

        if not self._initialized:
            self.set_error("Connection manager is not initialized")
            return None

        try:
            handle = open_handle(self._config, self.get_dsn(), build_options(self._config))
        except DriverError as e:
            self.set_error(
                f"Failed to create database connection: {e}",
                {"error_code": e.code, "connection_name": name},
            )
            _log.warning("Connection %r could not be opened: %s", name, e)
            return None

        adapter = ConnectionAdapter(handle)
        with self._lock:
            self._connections[name] = adapter
        if self._dev:
            _log.info("ConnectionManager: new connection created and cached: %s", name)
        return adapter

    def release_connection(self, connection: ConnectionAdapter) -> None:
        """Remove *connection* from the cache and release its handle; unknown adapters are ignored."""
        with self._lock:
            name = next(
                (n for n, cached in self._connections.items() if cached is connection),
                None,
            )
            if name is None:
                return
            del self._connections[name]
        self._release_adapter(name, connection)

    def _release_adapter(self, name: str, adapter: ConnectionAdapter) -> None:
        handle = adapter.get_connection()
        adapter.release_connection(handle)
        if handle is not None:
            try:
                handle.close()
            except DriverError as e:
                _log.warning("Closing connection %r failed: %s", name, e)
        if self._dev:
            _log.info("ConnectionManager: connection released: %s", name)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self) -> DatabaseConfig:
        return self._config

    def get_dsn(self) -> str:
        """DSN for the active configuration (memoized until the configuration changes)."""
        if self._dsn is None:
            self._dsn = build_dsn(self._config)
        return self._dsn

    def set_config(self, config: Mapping[str, Any]) -> bool:
        """
        Override the environment with *config*.

        Keys not supplied take their defaults (not previous values). All cached
        connections are released. Returns False, with the error recorded and
        nothing changed, when *config* does not validate.
        """
        try:
            override = DatabaseConfig(**dict(config))
        except (ValidationError, TypeError) as e:
            self.set_error(f"Invalid database configuration: {e}")
            return False

        self._config = override
        self._dsn = None
        self._initialized = True
        self.dispose()
        if self._dev:
            _log.info("ConnectionManager: configuration overridden: %s", override.summary())
        return True

    def reset_config(self) -> bool:
        """Drop any override, re-read the environment and release all cached connections."""
        self._dsn = None
        self.dispose()
        self._initialize()
        return self._initialized

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_pool_stats(self) -> dict[str, Any]:
        """Read-only snapshot (cache statistics, not pool statistics)."""
        with self._lock:
            cached = len(self._connections)
        return {
            "type": MANAGER_TYPE,
            "environment": MANAGER_ENVIRONMENT,
            "cached_connections": cached,
            "initialized": self._initialized,
            "persistent_enabled": self._config.persistent,
            "config": self._config.summary(),
        }


_connection_manager: ConnectionManager | None = None
_manager_lock = threading.Lock()
_teardown_registered = False


def get_connection_manager() -> ConnectionManager:
    """Return the process-wide ConnectionManager (thread-safe double-checked locking).

    The first creation registers ``reset_connection_manager`` with ``atexit`` so
    cached connections are released at interpreter shutdown.
    """
    global _connection_manager, _teardown_registered
    if _connection_manager is None:
        with _manager_lock:
            if _connection_manager is None:
                _connection_manager = ConnectionManager()
                if not _teardown_registered:
                    atexit.register(reset_connection_manager)
                    _teardown_registered = True
    return _connection_manager


def reset_connection_manager() -> None:
    """Release all connections of the process-wide manager and forget it."""
    global _connection_manager
    with _manager_lock:
        manager, _connection_manager = _connection_manager, None
    if manager is not None:
        manager.dispose()
