#!/usr/bin/env python3
"""
Check database connectivity through the connection manager.

Opens a named connection using DB_* env (optionally overridden on the
command line), runs BEGIN / SELECT 1 / ROLLBACK and prints the manager stats.

Usage:
  python scripts/check_connection.py [--name NAME] [--driver mysql] [--host H] [--port P]
                                     [--database DB] [--username U] [--password P]
  Or set env: DB_DRIVER, DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD, ...

Exit code 0 on success, 1 when the connection or the transaction cycle fails.
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from dbconn.core.connection import DriverError, get_connection_manager  # noqa: E402

_OVERRIDE_KEYS = ("driver", "host", "port", "database", "username", "password", "timeout")


def run_check(name: str, overrides: dict) -> int:
    """Run one begin/select/rollback cycle on connection *name*; return the exit code."""
    manager = get_connection_manager()
    if overrides and not manager.set_config(overrides):
        print(f"Error: {manager.get_error()}", file=sys.stderr)
        return 1
    if not manager.is_initialized():
        print(f"Error: {manager.get_error()}", file=sys.stderr)
        return 1

    print(f"Connecting {name!r} via {manager.get_dsn()}")
    conn = manager.get_connection(name)
    if conn is None:
        print(f"Error: {manager.get_error()}", file=sys.stderr)
        return 1

    try:
        if not conn.begin_transaction():
            print(f"Error: {conn.get_error()}", file=sys.stderr)
            return 1
        try:
            rows = conn.get_connection().query("SELECT 1 AS ok")
        except DriverError as e:
            print(f"Error: query failed: {e}", file=sys.stderr)
            conn.rollback()
            return 1
        print(f"SELECT 1 -> {rows}")
        if not conn.rollback():
            print(f"Error: {conn.get_error()}", file=sys.stderr)
            return 1
        print("---")
        print(json.dumps(manager.get_pool_stats(), indent=2))
        return 0
    finally:
        manager.release_connection(conn)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Open a named connection and run a BEGIN / SELECT 1 / ROLLBACK cycle."
    )
    parser.add_argument("--name", default="default", help="Connection name (default: default)")
    parser.add_argument("--driver", help="sqlite, mysql or pgsql (default: DB_DRIVER env)")
    parser.add_argument("--host", help="Database host (default: DB_HOST env)")
    parser.add_argument("--port", type=int, help="Database port (default: DB_PORT env)")
    parser.add_argument("--database", help="Database name or sqlite path (default: DB_NAME env)")
    parser.add_argument("--username", help="Database user (default: DB_USER env)")
    parser.add_argument("--password", help="Database password (default: DB_PASSWORD env)")
    parser.add_argument("--timeout", type=int, help="Connect timeout in seconds")
    args = parser.parse_args()

    # any override replaces the whole env configuration; unset keys take defaults
    overrides = {
        k: getattr(args, k) for k in _OVERRIDE_KEYS if getattr(args, k) is not None
    }
    sys.exit(run_check(args.name, overrides))


if __name__ == "__main__":
    main()
