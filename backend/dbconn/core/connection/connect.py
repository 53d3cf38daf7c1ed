"""
Connection-open helpers: DSN string, driver options and native connect.

Uses sqlite3 (in-process), pymysql (MySQL) or psycopg (PostgreSQL) based on
the configured driver. The DSN is a pure function of the configuration; the
manager memoizes it until the configuration changes.
"""

import sqlite3
from typing import Any

import psycopg
import pymysql
import pymysql.cursors
from psycopg.rows import dict_row

from dbconn.models import SQLITE_MEMORY, DriverEnum
from dbconn.schemas import DatabaseConfig

from .exceptions import DriverError
from .handle import HANDLE_CLASSES, DriverHandle

MYSQL_SQL_MODE = "STRICT_TRANS_TABLES,NO_ZERO_DATE,NO_ZERO_IN_DATE,ERROR_FOR_DIVISION_BY_ZERO"


def build_dsn(config: DatabaseConfig) -> str:
    """
    Build the driver-specific DSN.

    - sqlite: ``sqlite::memory:`` for the in-memory marker, else ``sqlite:<path>``
    - network drivers: ``<driver>:host=..;port=..;dbname=..;charset=..``
    """
    driver = config.driver.value
    if config.driver == DriverEnum.SQLITE:
        if config.database == SQLITE_MEMORY:
            return f"{driver}::memory:"
        return f"{driver}:{config.database}"
    return (
        f"{driver}:host={config.host};port={config.port};"
        f"dbname={config.database};charset={config.charset}"
    )


def sqlite_path_from_dsn(dsn: str) -> str:
    """Database path encoded in a sqlite DSN (``:memory:`` for the in-memory form)."""
    prefix = f"{DriverEnum.SQLITE.value}:"
    if not dsn.startswith(prefix):
        raise ValueError(f"Not a sqlite DSN: {dsn!r}")
    return dsn[len(prefix) :]


def build_options(config: DatabaseConfig) -> dict[str, Any]:
    """
    Driver options for a new connection; sqlite gets no persistence or timeout options.

    Consumed when connecting: ``fetch_mode`` (dict rows), ``timeout``,
    ``init_command`` and ``buffered_query`` (MySQL cursor class), and
    ``emulate_prepares`` (PostgreSQL ``prepare_threshold``). ``errmode``,
    ``persistent`` and MySQL's ``emulate_prepares`` are informational: every
    handle raises DriverError, and neither PyMySQL nor psycopg has a
    persistent-connection mode or client-side prepare emulation to switch.
    They are kept on the handle for inspection.
    """
    options: dict[str, Any] = {
        "errmode": "exception",
        "fetch_mode": "assoc",
    }
    if config.driver.is_network:
        options["emulate_prepares"] = False
        options["timeout"] = config.timeout
        options["persistent"] = config.persistent

    if config.driver == DriverEnum.MYSQL:
        options["init_command"] = (
            f"SET NAMES {config.charset} COLLATE {config.collation}, "
            f"SESSION sql_mode='{MYSQL_SQL_MODE}'"
        )
        options["buffered_query"] = True
    return options


def _dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict[str, Any]:
    return {d[0]: v for d, v in zip(cursor.description, row, strict=True)}


def _connect_sqlite(dsn: str, options: dict[str, Any]) -> Any:
    conn = sqlite3.connect(sqlite_path_from_dsn(dsn), isolation_level=None)
    if options.get("fetch_mode") == "assoc":
        conn.row_factory = _dict_factory
    return conn


def _connect_mysql(config: DatabaseConfig, options: dict[str, Any]) -> Any:
    assoc = options.get("fetch_mode") == "assoc"
    if options.get("buffered_query", True):
        cursorclass = pymysql.cursors.DictCursor if assoc else pymysql.cursors.Cursor
    else:
        cursorclass = pymysql.cursors.SSDictCursor if assoc else pymysql.cursors.SSCursor
    return pymysql.connect(
        host=config.host,
        port=config.port,
        database=config.database,
        user=config.username,
        password=config.password,
        charset=config.charset,
        connect_timeout=options.get("timeout", config.timeout) or None,
        init_command=options.get("init_command"),
        cursorclass=cursorclass,
        autocommit=True,
    )


def _connect_pgsql(config: DatabaseConfig, options: dict[str, Any]) -> Any:
    kwargs: dict[str, Any] = {
        "host": config.host,
        "port": config.port,
        "dbname": config.database,
        "user": config.username,
        "password": config.password,
        "autocommit": True,
    }
    timeout = options.get("timeout", config.timeout)
    if timeout:
        kwargs["connect_timeout"] = timeout
    if options.get("fetch_mode") == "assoc":
        kwargs["row_factory"] = dict_row
    if options.get("emulate_prepares") is False:
        # prepare server-side from the first execution
        kwargs["prepare_threshold"] = 0
    return psycopg.connect(**kwargs)


def open_handle(
    config: DatabaseConfig,
    dsn: str,
    options: dict[str, Any],
) -> DriverHandle:
    """
    Open a native connection and wrap it in the matching DriverHandle.

    Credentials are only passed to network drivers. Raises DriverError when
    the driver refuses the connection or rejects a configuration value
    (unknown charset, NUL byte in a path) before reaching the server.
    """
    handle_cls = HANDLE_CLASSES[config.driver]
    try:
        if config.driver == DriverEnum.SQLITE:
            raw = _connect_sqlite(dsn, options)
        elif config.driver == DriverEnum.MYSQL:
            raw = _connect_mysql(config, options)
        else:
            raw = _connect_pgsql(config, options)
    except handle_cls.native_errors as e:
        raise DriverError(str(e), code=handle_cls._error_code(e)) from e
    except (ValueError, TypeError, AttributeError) as e:
        raise DriverError(str(e)) from e
    return handle_cls(raw, dsn=dsn, options=options)
