"""Core utilities package.

Pure helpers shared across the codebase: display formatting and the
standard subprocess wrapper for external tool invocation.
"""

from mkvdoctor.core.formatting import (
    format_duration,
    format_file_size,
    format_offset,
)
from mkvdoctor.core.subprocess_utils import run_command

__all__ = [
    "format_duration",
    "format_file_size",
    "format_offset",
    "run_command",
]
