"""
Last-error bookkeeping shared by the manager and the adapter.
"""

import json
from typing import Any


def format_error(error: str, context: dict[str, Any] | None = None) -> str:
    """Append a JSON rendering of *context* to *error* when context is non-empty."""
    if not context:
        return error
    return f"{error} [Context: {json.dumps(context, default=str)}]"


class ErrorState:
    """Mixin holding the last error message (``None`` until an error is set)."""

    _error: str | None = None

    def get_error(self) -> str | None:
        return self._error

    def set_error(self, error: str | None, context: dict[str, Any] | None = None) -> None:
        """Record *error*; ``None`` clears it."""
        if error is None:
            self._error = None
            return
        self._error = format_error(error, context)

    def clear_error(self) -> None:
        self._error = None
