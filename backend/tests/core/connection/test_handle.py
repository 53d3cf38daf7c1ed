"""Unit tests for core.connection.handle (driver handles and cursor_to_dicts)."""

import sqlite3
from unittest.mock import MagicMock

import psycopg
import pymysql
import pytest
from psycopg.pq import TransactionStatus
from pymysql.constants import SERVER_STATUS

from dbconn.core.connection import DriverError, cursor_to_dicts
from dbconn.core.connection.handle import MysqlHandle, PgsqlHandle, SqliteHandle


@pytest.fixture
def sqlite_handle() -> SqliteHandle:
    raw = sqlite3.connect(":memory:", isolation_level=None)
    handle = SqliteHandle(raw, dsn="sqlite::memory:")
    handle.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)")
    yield handle
    handle.close()


# --- cursor_to_dicts ---


def test_cursor_to_dicts_tuple_rows() -> None:
    cur = MagicMock()
    cur.description = [("id",), ("name",)]
    cur.fetchall.return_value = [(1, "a"), (2, "b")]
    assert cursor_to_dicts(cur) == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]


def test_cursor_to_dicts_mapping_rows() -> None:
    cur = MagicMock()
    cur.description = [("id",)]
    cur.fetchall.return_value = [{"id": 1}]
    assert cursor_to_dicts(cur) == [{"id": 1}]


def test_cursor_to_dicts_no_description() -> None:
    cur = MagicMock()
    cur.description = None
    assert cursor_to_dicts(cur) == []
    cur.fetchall.assert_not_called()


# --- SqliteHandle ---


def test_sqlite_begin_commit(sqlite_handle: SqliteHandle) -> None:
    assert sqlite_handle.in_transaction() is False
    sqlite_handle.begin()
    assert sqlite_handle.in_transaction() is True
    sqlite_handle.execute("INSERT INTO items (name) VALUES (?)", ("a",))
    sqlite_handle.commit()
    assert sqlite_handle.in_transaction() is False
    assert sqlite_handle.query("SELECT name FROM items") == [{"name": "a"}]


def test_sqlite_begin_rollback(sqlite_handle: SqliteHandle) -> None:
    sqlite_handle.begin()
    sqlite_handle.execute("INSERT INTO items (name) VALUES (?)", ("a",))
    sqlite_handle.rollback()
    assert sqlite_handle.query("SELECT name FROM items") == []


def test_sqlite_commit_without_transaction_raises(sqlite_handle: SqliteHandle) -> None:
    with pytest.raises(DriverError, match="no transaction is active"):
        sqlite_handle.commit()


def test_sqlite_bad_sql_raises_driver_error(sqlite_handle: SqliteHandle) -> None:
    with pytest.raises(DriverError) as exc_info:
        sqlite_handle.execute("SELECT * FROM missing_table")
    assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)


def test_close_is_idempotent(sqlite_handle: SqliteHandle) -> None:
    sqlite_handle.close()
    sqlite_handle.close()
    assert sqlite_handle.closed is True
    assert sqlite_handle.in_transaction() is False
    assert "closed" in repr(sqlite_handle)


# --- MysqlHandle ---


def test_mysql_handle_delegates_transaction_verbs() -> None:
    raw = MagicMock()
    handle = MysqlHandle(raw)
    handle.begin()
    handle.commit()
    handle.rollback()
    raw.begin.assert_called_once_with()
    raw.commit.assert_called_once_with()
    raw.rollback.assert_called_once_with()


def test_mysql_handle_native_in_transaction() -> None:
    raw = MagicMock()
    raw.server_status = SERVER_STATUS.SERVER_STATUS_AUTOCOMMIT
    handle = MysqlHandle(raw)
    assert handle.in_transaction() is False
    raw.server_status = SERVER_STATUS.SERVER_STATUS_AUTOCOMMIT | SERVER_STATUS.SERVER_STATUS_IN_TRANS
    assert handle.in_transaction() is True


def test_mysql_handle_error_code() -> None:
    raw = MagicMock()
    raw.commit.side_effect = pymysql.err.OperationalError(2013, "Lost connection")
    handle = MysqlHandle(raw)
    with pytest.raises(DriverError) as exc_info:
        handle.commit()
    assert exc_info.value.code == 2013


# --- PgsqlHandle ---


def test_pgsql_handle_uses_explicit_statements() -> None:
    raw = MagicMock()
    handle = PgsqlHandle(raw)
    handle.begin()
    handle.commit()
    handle.begin()
    handle.rollback()
    assert [c.args[0] for c in raw.execute.call_args_list] == ["BEGIN", "COMMIT", "BEGIN", "ROLLBACK"]


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (TransactionStatus.IDLE, False),
        (TransactionStatus.INTRANS, True),
        (TransactionStatus.INERROR, True),
    ],
)
def test_pgsql_handle_native_in_transaction(status: TransactionStatus, expected: bool) -> None:
    raw = MagicMock()
    raw.info.transaction_status = status
    assert PgsqlHandle(raw).in_transaction() is expected


def test_pgsql_handle_error_translated() -> None:
    raw = MagicMock()
    raw.execute.side_effect = psycopg.OperationalError("server closed the connection")
    with pytest.raises(DriverError, match="server closed"):
        PgsqlHandle(raw).begin()
