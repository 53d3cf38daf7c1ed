"""Capability interfaces the adapter and the manager satisfy."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ConnectionInterface(Protocol):
    """One database connection with transaction control and error state."""

    def get_connection(self) -> Optional[Any]:
        """Return the underlying handle, or None once released."""
        ...

    def release_connection(self, connection: Optional[Any]) -> None:
        """Drop the handle if *connection* is the one currently owned."""
        ...

    def begin_transaction(self) -> bool: ...

    def commit(self) -> bool: ...

    def rollback(self) -> bool: ...

    def in_transaction(self) -> bool: ...

    def get_error(self) -> Optional[str]: ...

    def set_error(self, error: Optional[str], context: Optional[dict[str, Any]] = None) -> None: ...

    def clear_error(self) -> None: ...

    def is_initialized(self) -> bool: ...


@runtime_checkable
class ConnectionManagerInterface(Protocol):
    """Hands out named connections and reports on them."""

    def get_connection(self, name: str = "default") -> Optional[ConnectionInterface]: ...

    def release_connection(self, connection: ConnectionInterface) -> None: ...

    def get_pool_stats(self) -> dict[str, Any]: ...

    def get_error(self) -> Optional[str]: ...

    def set_error(self, error: Optional[str], context: Optional[dict[str, Any]] = None) -> None: ...

    def clear_error(self) -> None: ...

    def is_initialized(self) -> bool: ...
