"""
Exceptions raised inside the connection layer.

They never cross the adapter/manager boundary: operations catch them and
report failure through a False/None return plus the recorded error string.
"""

from typing import Any


class DbConnError(Exception):
    """Base class for connection-layer errors."""


class DriverError(DbConnError):
    """A native driver failed (connect, begin, commit, rollback, execute).

    ``code`` carries the driver's own error code (MySQL errno, SQLSTATE, ...)
    when one is available.
    """

    def __init__(self, message: str, code: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message
