"""JSON log formatting for MKV Doctor."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_PROBE_ATTRS = ("probe_name", "file_path", "probe_tag")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Keys: ``timestamp`` (ISO-8601 UTC), ``level``, ``message``, ``logger``,
    ``probe`` and ``file`` when logged inside a probe, ``context`` for
    values passed through ``extra=``, and ``exception`` when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name

        probe_name = getattr(record, "probe_name", None)
        if probe_name:
            entry["probe"] = probe_name
        file_path = getattr(record, "file_path", None)
        if file_path:
            entry["file"] = file_path

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and key not in _PROBE_ATTRS
            and not key.startswith("_")
        }
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
