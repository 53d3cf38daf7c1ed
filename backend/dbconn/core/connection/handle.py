"""
Driver handles: one native DB-API connection normalised to a common surface.

Every handle runs its native connection in autocommit mode and opens
transactions explicitly, so ``in_transaction()`` can be answered by the
driver itself. Native driver exceptions are re-raised as ``DriverError``.
"""

import sqlite3
from collections.abc import Mapping
from typing import Any

import psycopg
import pymysql
from psycopg.pq import TransactionStatus
from pymysql.constants import SERVER_STATUS

from dbconn.models import DriverEnum

from .exceptions import DriverError


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for tuple rows and mapping rows."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    rows = cursor.fetchall()
    return [
        dict(row) if isinstance(row, Mapping) else dict(zip(names, row, strict=True))
        for row in rows
    ]


class DriverHandle:
    """Base handle. Subclasses set ``driver`` and ``native_errors`` and implement the transaction verbs."""

    driver: DriverEnum
    native_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, raw: Any, *, dsn: str = "", options: dict[str, Any] | None = None) -> None:
        self._raw = raw
        self.dsn = dsn
        self.options = dict(options or {})
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.dsn!r} {state}>"

    @property
    def raw(self) -> Any:
        """The native DB-API connection."""
        return self._raw

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Transaction verbs
    # ------------------------------------------------------------------

    def begin(self) -> None:
        self._call(self._begin)

    def commit(self) -> None:
        self._call(self._commit)

    def rollback(self) -> None:
        self._call(self._rollback)

    def in_transaction(self) -> bool:
        """Whether the driver itself reports an open transaction."""
        if self._closed:
            return False
        return self._call(self._native_in_transaction)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute(self, sql: str, params: Any = None) -> Any:
        """Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount."""

        def run() -> Any:
            cur = self._raw.cursor()
            if params is not None:
                cur.execute(sql, params)
            else:
                cur.execute(sql)
            return cur

        return self._call(run)

    def query(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        cur = self.execute(sql, params)
        try:
            return self._call(cursor_to_dicts, cur)
        finally:
            cur.close()

    def close(self) -> None:
        """Close the native connection; safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._call(self._raw.close)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _call(self, fn: Any, *args: Any) -> Any:
        try:
            return fn(*args)
        except self.native_errors as e:
            raise DriverError(str(e), code=self._error_code(e)) from e

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        return None

    def _begin(self) -> None:
        raise NotImplementedError

    def _commit(self) -> None:
        raise NotImplementedError

    def _rollback(self) -> None:
        raise NotImplementedError

    def _native_in_transaction(self) -> bool:
        raise NotImplementedError


class SqliteHandle(DriverHandle):
    driver = DriverEnum.SQLITE
    native_errors = (sqlite3.Error,)

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        return getattr(exc, "sqlite_errorcode", None)

    def _begin(self) -> None:
        self._raw.execute("BEGIN")

    def _commit(self) -> None:
        self._raw.execute("COMMIT")

    def _rollback(self) -> None:
        self._raw.execute("ROLLBACK")

    def _native_in_transaction(self) -> bool:
        return bool(self._raw.in_transaction)


class MysqlHandle(DriverHandle):
    driver = DriverEnum.MYSQL
    native_errors = (pymysql.err.MySQLError,)

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        if exc.args and isinstance(exc.args[0], int):
            return exc.args[0]
        return None

    def _begin(self) -> None:
        self._raw.begin()

    def _commit(self) -> None:
        self._raw.commit()

    def _rollback(self) -> None:
        self._raw.rollback()

    def _native_in_transaction(self) -> bool:
        return bool(self._raw.server_status & SERVER_STATUS.SERVER_STATUS_IN_TRANS)


class PgsqlHandle(DriverHandle):
    driver = DriverEnum.PGSQL
    native_errors = (psycopg.Error,)

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        return getattr(exc, "sqlstate", None)

    def _begin(self) -> None:
        self._raw.execute("BEGIN")

    def _commit(self) -> None:
        self._raw.execute("COMMIT")

    def _rollback(self) -> None:
        self._raw.execute("ROLLBACK")

    def _native_in_transaction(self) -> bool:
        return self._raw.info.transaction_status in (
            TransactionStatus.INTRANS,
            TransactionStatus.INERROR,
        )


HANDLE_CLASSES: dict[DriverEnum, type[DriverHandle]] = {
    DriverEnum.SQLITE: SqliteHandle,
    DriverEnum.MYSQL: MysqlHandle,
    DriverEnum.PGSQL: PgsqlHandle,
}
