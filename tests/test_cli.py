import json
import logging

import pytest
import structlog

from lifegate.cli import main
from lifegate.config import get_settings


@pytest.fixture(autouse=True)
def _restore_logging():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def _write_tree(tmp_path, body):
    path = tmp_path / "containers.yaml"
    path.write_text(body)
    return str(path)


def test_cli_json_output(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("LIFEGATE_DEFAULT_LIFECYCLE", raising=False)
    path = _write_tree(
        tmp_path,
        "containers:\n"
        "  - id: Outer\n"
        "    lifecycle: per_class\n"
        "  - id: Outer.Inner\n"
        "    parent: Outer\n"
        "  - id: Plain\n",
    )
    assert main([path, "--json", "--log-level", "WARNING"]) == 0

    doc = json.loads(capsys.readouterr().out)
    rows = {row["container_id"]: row for row in doc["containers"]}
    assert doc["default_mode"] == "per_method"
    assert rows["Outer.Inner"]["mode"] == "per_class"
    assert rows["Outer.Inner"]["source_id"] == "Outer"
    assert rows["Plain"]["source_id"] is None


def test_cli_table_output(tmp_path, capsys):
    path = _write_tree(tmp_path, "containers:\n  - id: Plain\n    lifecycle: per_method\n")
    assert main([path, "--log-level", "WARNING"]) == 0
    out = capsys.readouterr().out
    assert "Plain" in out
    assert "per_method" in out


def test_cli_reports_cycle(tmp_path, capsys):
    path = _write_tree(
        tmp_path,
        "containers:\n"
        "  - id: A\n"
        "    parent: B\n"
        "  - id: B\n"
        "    parent: A\n",
    )
    assert main([path, "--log-level", "ERROR"]) == 2
    assert "ILLEGAL_LIFECYCLE_TRANSITION" in capsys.readouterr().out


def test_cli_reports_duplicate_declaration(tmp_path, capsys):
    path = _write_tree(tmp_path, "containers: [{id: A}, {id: A}]\n")
    assert main([path, "--log-level", "ERROR"]) == 2
    out = capsys.readouterr().out
    assert "cli.resolve.failed" in out
    assert "INVALID_DECLARATIONS" in out


def test_cli_reports_unknown_lifecycle(tmp_path, capsys):
    path = _write_tree(tmp_path, "containers:\n  - id: A\n    lifecycle: per_suite\n")
    assert main([path, "--log-level", "ERROR"]) == 2
    assert "per_suite" in capsys.readouterr().out


def test_cli_reports_entry_without_id(tmp_path, capsys):
    path = _write_tree(tmp_path, "containers:\n  - lifecycle: per_class\n")
    assert main([path, "--log-level", "ERROR"]) == 2
    assert "INVALID_DECLARATIONS" in capsys.readouterr().out


def test_cli_reports_invalid_settings(tmp_path, capsys):
    path = _write_tree(tmp_path, "containers:\n  - id: A\n")
    config = tmp_path / "lifegate.yaml"
    config.write_text("default_lifecycle: per_suite\n")
    assert main([path, "--config", str(config), "--log-level", "ERROR"]) == 2
    assert "INVALID_SETTINGS" in capsys.readouterr().out


def test_cli_uses_environment_settings_without_config(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("LIFEGATE_DEFAULT_LIFECYCLE", "per_class")
    path = _write_tree(tmp_path, "containers:\n  - id: Plain\n")
    assert main([path, "--json", "--log-level", "WARNING"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["default_mode"] == "per_class"
    assert doc["containers"][0]["mode"] == "per_class"
