"""Probe context for structured logging.

Provides context propagation using contextvars, enabling automatic
injection of the running probe name and file path into log records. Probe
worker threads set their own context, so concurrent probes log correctly.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_probe_name: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "probe_name", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def set_probe_context(
    probe_name: str | None,
    file_path: Path | str | None = None,
) -> None:
    """Set the current probe context.

    Args:
        probe_name: Name of the running probe (e.g., "integrity").
        file_path: Path of the file being analyzed, or None.
    """
    _probe_name.set(probe_name)
    _file_path.set(str(file_path) if file_path is not None else None)


def clear_probe_context() -> None:
    """Clear the current probe context."""
    _probe_name.set(None)
    _file_path.set(None)


@contextmanager
def probe_context(
    probe_name: str | None,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for probe execution context.

    Sets the context on entry and restores the previous one on exit.

    Example:
        with probe_context("integrity", "/path/to/file.mkv"):
            logger.info("Decoding")  # Automatically includes context
    """
    old_probe = _probe_name.get()
    old_path = _file_path.get()
    try:
        set_probe_context(probe_name, file_path)
        yield
    finally:
        _probe_name.set(old_probe)
        _file_path.set(old_path)


def get_probe_context() -> tuple[str | None, str | None]:
    """Get current probe context.

    Returns:
        Tuple of (probe_name, file_path), either may be None.
    """
    return _probe_name.get(), _file_path.get()


class ProbeContextFilter(logging.Filter):
    """Logging filter that injects probe context into log records.

    Adds probe_name and file_path attributes to each LogRecord. For text
    format, also adds a compact probe_tag like ``[probe:integrity] ``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject probe context into log record. Never filters records out."""
        probe_name, file_path = get_probe_context()

        record.probe_name = probe_name
        record.file_path = file_path
        record.probe_tag = f"[probe:{probe_name}] " if probe_name else ""

        return True
