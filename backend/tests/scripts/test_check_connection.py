"""Tests for scripts/check_connection.py (loaded by path; scripts/ is not a package)."""

import importlib.util
import json
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parents[3] / "scripts" / "check_connection.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("check_connection", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_run_check_sqlite_override(capsys: pytest.CaptureFixture[str]) -> None:
    script = _load_script()

    code = script.run_check("smoke", {"driver": "sqlite", "database": ":memory:"})

    out = capsys.readouterr().out
    assert code == 0
    assert "sqlite::memory:" in out
    assert "SELECT 1 -> [{'ok': 1}]" in out
    stats = json.loads(out.split("---\n", 1)[1])
    assert stats["config"]["driver"] == "sqlite"
    assert stats["cached_connections"] == 1


def test_run_check_reports_connect_failure(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = _load_script()

    code = script.run_check(
        "smoke", {"driver": "sqlite", "database": str(tmp_path / "missing" / "x.db")}
    )

    assert code == 1
    assert "Failed to create database connection" in capsys.readouterr().err


def test_run_check_reports_invalid_override(capsys: pytest.CaptureFixture[str]) -> None:
    script = _load_script()
    assert script.run_check("smoke", {"driver": "oracle"}) == 1
    assert "Invalid database configuration" in capsys.readouterr().err


def test_main_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    script = _load_script()
    monkeypatch.setattr(
        "sys.argv", ["check_connection.py", "--driver", "sqlite", "--database", ":memory:"]
    )
    with pytest.raises(SystemExit) as exc_info:
        script.main()
    assert exc_info.value.code == 0
