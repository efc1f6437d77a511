"""Root logger setup from LoggingConfig."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from mkvdoctor.logging.context import ProbeContextFilter
from mkvdoctor.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from mkvdoctor.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s - %(probe_tag)s%(name)s - %(levelname)s - %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def _file_handler(config: LoggingConfig) -> logging.Handler | None:
    """Rotating handler for ``config.file``, or None if it cannot be opened."""
    if not config.file:
        return None
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # logging is not configured yet, so report directly
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    Logs go to the configured file and, when ``include_stderr`` is set or
    no file could be opened, to stderr. Every handler carries the probe
    context filter, so records logged inside a probe name it.
    """
    level = logging.getLevelName(config.level.upper())
    formatter = _formatter(config)
    context_filter = ProbeContextFilter()

    handlers: list[logging.Handler] = []
    file_handler = _file_handler(config)
    if file_handler is not None:
        handlers.append(file_handler)
    if config.include_stderr or file_handler is None:
        handlers.append(logging.StreamHandler(sys.stderr))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
