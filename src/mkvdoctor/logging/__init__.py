"""Structured logging module for MKV Doctor.

Provides configurable logging with JSON format support and file rotation.
Includes probe context support for concurrent probe execution.
"""

from mkvdoctor.logging.config import configure_logging
from mkvdoctor.logging.context import (
    ProbeContextFilter,
    clear_probe_context,
    get_probe_context,
    probe_context,
    set_probe_context,
)
from mkvdoctor.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "ProbeContextFilter",
    "clear_probe_context",
    "configure_logging",
    "get_probe_context",
    "probe_context",
    "set_probe_context",
]
