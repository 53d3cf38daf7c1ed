"""
ConnectionAdapter: transaction control and error state over one DriverHandle.

States: no handle, handle idle, handle in transaction. Every operation
reports failure as a False return plus ``get_error()``; driver exceptions
never escape. A failed commit or rollback leaves the adapter in the
transaction, so the caller decides whether to retry or roll back.
"""

import logging

from .errors import ErrorState
from .exceptions import DriverError
from .handle import DriverHandle

_log = logging.getLogger(__name__)


class ConnectionAdapter(ErrorState):
    """Wraps one DriverHandle (or none) and tracks its transaction state."""

    def __init__(self, handle: DriverHandle | None = None) -> None:
        self._handle = handle
        self._initialized = handle is not None
        self._in_transaction = False
        self._error = None

    def __repr__(self) -> str:
        return f"<ConnectionAdapter handle={self._handle!r} in_transaction={self._in_transaction}>"

    def get_connection(self) -> DriverHandle | None:
        """The owned handle, or None once released."""
        return self._handle

    def release_connection(self, connection: DriverHandle | None) -> None:
        """Drop the handle when *connection* is the one owned; otherwise do nothing."""
        if connection is not None and connection is self._handle:
            self._handle = None
            self._in_transaction = False

    def begin_transaction(self) -> bool:
        if self._handle is None:
            self.set_error("No connection available")
            return False
        if self._in_transaction:
            self.set_error("Already in transaction")
            return False
        try:
            self._handle.begin()
        except DriverError as e:
            self.set_error(f"Failed to begin transaction: {e}")
            _log.warning("begin failed on %r: %s", self._handle, e)
            return False
        self._in_transaction = True
        return True

    def commit(self) -> bool:
        if self._handle is None:
            self.set_error("No connection available")
            return False
        if not self._in_transaction:
            self.set_error("No active transaction to commit")
            return False
        try:
            self._handle.commit()
        except DriverError as e:
            # transaction flag stays set
            self.set_error(f"Failed to commit transaction: {e}")
            _log.warning("commit failed on %r: %s", self._handle, e)
            return False
        self._in_transaction = False
        return True

    def rollback(self) -> bool:
        if self._handle is None:
            self.set_error("No connection available")
            return False
        if not self._in_transaction:
            self.set_error("No active transaction to rollback")
            return False
        try:
            self._handle.rollback()
        except DriverError as e:
            self.set_error(f"Failed to rollback transaction: {e}")
            _log.warning("rollback failed on %r: %s", self._handle, e)
            return False
        self._in_transaction = False
        return True

    def in_transaction(self) -> bool:
        """Own flag OR the driver's native check, so transactions started on the raw handle count too."""
        if self._handle is None:
            return False
        if self._in_transaction:
            return True
        try:
            return self._handle.in_transaction()
        except DriverError:
            return False

    def is_initialized(self) -> bool:
        return self._initialized and self._handle is not None
