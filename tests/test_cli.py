"""CLI tests for `tagdir plan` and `tagdir apply`."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from tagdir.cli import cli

TAGS = {"artist": "Band", "album": "Record", "year": "1999"}


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


@pytest.fixture
def library(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a library whose audio files all carry ``TAGS``."""
    root = tmp_path / "library"
    album = root / "Old Name"
    album.mkdir(parents=True)
    (album / "01.mp3").write_bytes(b"audio")
    (album / "02.mp3").write_bytes(b"audio")
    (album / "cover.jpg").write_bytes(b"image")
    monkeypatch.setattr("tagdir.tags.reader.read_tags", lambda path, source="easy": dict(TAGS))
    return root


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "tagdir reorganizes audio directories" in result.output
    for command in ("plan", "apply", "config"):
        assert command in result.output


def test_plan_json_lists_actions_without_changes(library: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["plan", str(library), "--format", "%{artist} - %{album}", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    root = library.resolve().as_posix()
    assert payload["context"]["files"] == 2
    assert payload["actions"] == [
        {
            "verb": "Rename directory",
            "source": f"{root}/Old Name",
            "destination": f"{root}/Band - Record",
        }
    ]
    assert "report" not in payload
    assert (library / "Old Name" / "01.mp3").exists()


def test_apply_moves_directories(library: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["apply", str(library), "--format", "%{artist}/%{year} %{album}"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    target = library / "Band" / "1999 Record"
    assert sorted(path.name for path in target.iterdir()) == ["01.mp3", "02.mp3"]
    assert (library / "Band" / "cover.jpg").exists()
    assert not (library / "Old Name").exists()


def test_apply_dry_run_leaves_files(library: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["apply", str(library), "--dry-run", "--summary"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert "plan summary" in result.output
    assert (library / "Old Name" / "01.mp3").exists()


def test_apply_reports_failures_with_exit_code(library: Path, tmp_path: Path) -> None:
    (library / "Band - Record").write_text("in the way", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(cli, ["apply", str(library)], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "Errors encountered" in result.output
    assert (library / "Old Name" / "01.mp3").exists()


def test_config_file_format_is_used(library: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["config", "set", "renamer.mode", "--value", "create"], env=env)
    runner.invoke(cli, ["config", "set", "renamer.format", "--value", "'%{year}'"], env=env)

    result = runner.invoke(cli, ["apply", str(library), "--quiet"], env=env)

    assert result.exit_code == 0
    assert (library / "Old Name" / "1999" / "01.mp3").exists()


def test_json_and_quiet_conflict(library: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["plan", str(library), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet" in result.output
