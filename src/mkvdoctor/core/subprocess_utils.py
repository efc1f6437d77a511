"""Subprocess wrapper for the external media tools.

Every ffprobe, ffmpeg, mkvinfo and mkvmerge invocation goes through
run_command, so output decoding, timeouts and debug logging behave the same
for all of them.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - external media tools are the whole job
import time
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

# Arguments kept when a command is summarized in a warning
_SUMMARY_ARGS = 3


def tool_name(args: Sequence[str]) -> str:
    """Executable basename of a command, e.g. ``ffprobe``."""
    if not args:
        return "unknown"
    return Path(args[0]).name


def summarize_command(args: Sequence[str]) -> str:
    """Shortened command line for log messages."""
    head = " ".join(args[:_SUMMARY_ARGS])
    return head + " ..." if len(args) > _SUMMARY_ARGS else head


def run_command(
    args: Sequence[str | Path],
    timeout: float | None = 120,
) -> tuple[str, str, int]:
    """Run a tool to completion and capture its output.

    Output is decoded as text with undecodable bytes replaced; tool
    diagnostics often quote raw container bytes.

    Args:
        args: Executable and arguments. Paths are converted to strings.
        timeout: Seconds before the tool is killed, or None to wait
            indefinitely.

    Returns:
        Tuple of (stdout, stderr, returncode). A non-zero return code is not
        an error here; callers decide what it means.

    Raises:
        subprocess.TimeoutExpired: The tool ran past ``timeout``. The child
            has already been killed when this is raised.
        OSError: The executable could not be started.
    """
    cmd = [str(arg) for arg in args]
    name = tool_name(cmd)

    logger.debug("Running %s", " ".join(cmd), extra={"command": name})
    started = time.monotonic()

    try:
        completed = subprocess.run(  # nosec B603 - argument list, no shell
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "%s killed after %ss: %s",
            name,
            timeout,
            summarize_command(cmd),
            extra={"command": name, "timeout_seconds": timeout},
        )
        raise

    logger.debug(
        "%s exited with %d",
        name,
        completed.returncode,
        extra={
            "command": name,
            "elapsed_seconds": round(time.monotonic() - started, 3),
        },
    )
    return completed.stdout or "", completed.stderr or "", completed.returncode
