"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from tagdir.config import LoggingSettings
from tagdir.logging_setup import LOG_FILENAME, configure_logging


def _own_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in root.handlers if getattr(handler, "_tagdir_handler", False)]


def test_configure_logging_replaces_previous_handlers(tmp_path: Path) -> None:
    settings = LoggingSettings(level="info")

    configure_logging(settings, tmp_path)
    root = configure_logging(settings, tmp_path)

    handlers = _own_handlers(root)
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert root.level == logging.INFO


def test_file_logging_writes_rotating_log(tmp_path: Path) -> None:
    settings = LoggingSettings(level="DEBUG", file_logging=True, backup_count=1)

    root = configure_logging(settings, tmp_path / "logs")
    logging.getLogger("tagdir.test").debug("hello from the test")
    for handler in _own_handlers(root):
        handler.flush()

    log_text = (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")
    assert "hello from the test" in log_text

    configure_logging(LoggingSettings(), tmp_path / "logs")
    assert len(_own_handlers(root)) == 1
