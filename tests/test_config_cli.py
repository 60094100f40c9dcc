"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tagdir.cli import cli
from tagdir.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".tagdir" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "renamer:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "renamer.max_descend_depth", "--value", "3"], env=env
    )

    assert result.exit_code == 0
    assert "Updated renamer.max_descend_depth" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.renamer.max_descend_depth == 3


def test_config_set_same_value_reports_no_changes(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "renamer.mode", "--value", "rename"], env=env)

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "renamer.mode", "--value", "move"], env=env)

    assert result.exit_code != 0
    manager = ConfigManager(config_path=_config_path(tmp_path))
    assert manager.load(include_env=False).renamer.mode == "rename"


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("mode: rename", "mode: create")

    monkeypatch.setattr("tagdir.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.renamer.mode == "create"
