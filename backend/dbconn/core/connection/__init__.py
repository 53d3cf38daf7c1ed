"""
Database connections: named connection cache and transaction adapter.

Not a pool: one cached connection per name, no size limits, no idle
eviction. sqlite3, pymysql and psycopg are used directly based on the
configured driver.
"""

from .adapter import ConnectionAdapter
from .connect import build_dsn, build_options, open_handle
from .contracts import ConnectionInterface, ConnectionManagerInterface
from .exceptions import DbConnError, DriverError
from .handle import DriverHandle, cursor_to_dicts
from .manager import ConnectionManager, get_connection_manager, reset_connection_manager

__all__ = [
    "ConnectionAdapter",
    "ConnectionInterface",
    "ConnectionManager",
    "ConnectionManagerInterface",
    "DbConnError",
    "DriverError",
    "DriverHandle",
    "build_dsn",
    "build_options",
    "cursor_to_dicts",
    "get_connection_manager",
    "open_handle",
    "reset_connection_manager",
]
