from collections.abc import Generator

import pytest

from dbconn.core.connection import ConnectionManager, reset_connection_manager

_ENV_VARS = (
    "DB_DRIVER",
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    "DB_CHARSET",
    "DB_COLLATION",
    "DB_PERSISTENT_CONNECTIONS",
    "DB_CONNECTION_TIMEOUT",
    "APP_ENV",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Start every test from default settings: no DB_* env, no .env file, no singleton."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_connection_manager()
    yield
    reset_connection_manager()


@pytest.fixture
def sqlite_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the environment at an in-memory sqlite database."""
    monkeypatch.setenv("DB_DRIVER", "sqlite")
    monkeypatch.setenv("DB_NAME", ":memory:")


@pytest.fixture
def manager(sqlite_env: None) -> Generator[ConnectionManager, None, None]:
    m = ConnectionManager()
    yield m
    m.dispose()
