"""Fatal error output for the mkv-doctor CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from mkvdoctor.cli.exit_codes import ExitCode


def error_payload(
    message: str, code: ExitCode, file: Path | None = None
) -> dict[str, Any]:
    """JSON document describing a run that aborted before analysis."""
    payload: dict[str, Any] = {
        "status": "failed",
        "error": {"code": code.name, "message": message},
    }
    if file is not None:
        payload["file"] = str(file)
    return payload


def error_exit(
    message: str,
    code: ExitCode,
    json_output: bool = False,
    file: Path | None = None,
) -> NoReturn:
    """Report a fatal error on stderr and exit with ``code``.

    Args:
        message: What went wrong.
        code: Fatal exit code (always >= 10).
        json_output: Emit a JSON error document instead of plain text.
        file: Input file the error concerns, if any.
    """
    if json_output:
        click.echo(json.dumps(error_payload(message, code, file)), err=True)
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))
