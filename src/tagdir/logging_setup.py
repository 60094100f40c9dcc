"""Logging configuration for the tagdir CLI."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from tagdir.config.models import LoggingSettings

LOG_FILENAME = "tagdir.log"

_HANDLER_MARK = "_tagdir_handler"


def configure_logging(settings: LoggingSettings, log_dir: Path | None = None) -> logging.Logger:
    """Install tagdir's handlers on the root logger.

    Handlers installed by an earlier call are replaced, so the function can be
    called once per CLI invocation.

    Args:
        settings: Level and rotation settings.
        log_dir: Directory for the rotating log file when file logging is on.

    Returns:
        logging.Logger: The configured root logger.
    """
    root = logging.getLogger()
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()

    stream = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    stream.setFormatter(logging.Formatter("%(message)s"))
    setattr(stream, _HANDLER_MARK, True)
    root.addHandler(stream)

    if settings.file_logging and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILENAME,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        rotating.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        setattr(rotating, _HANDLER_MARK, True)
        root.addHandler(rotating)

    return root


__all__ = ["LOG_FILENAME", "configure_logging"]
