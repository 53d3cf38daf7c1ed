"""
Shared enums for the connection layer.
"""

from enum import Enum


class DriverEnum(str, Enum):
    """Supported database drivers (sqlite in-process, mysql and pgsql over the network)."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    PGSQL = "pgsql"

    @property
    def is_network(self) -> bool:
        return self is not DriverEnum.SQLITE


# SQLite database target that selects a private in-memory database.
SQLITE_MEMORY = ":memory:"
