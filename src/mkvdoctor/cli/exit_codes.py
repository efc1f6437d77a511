"""Centralized exit codes for the mkv-doctor CLI.

A normal run exits with the number of failed probes (0 = healthy, at most
the number of probes in the selected mode). Fatal conditions that abort
before any probe runs use the distinct codes below, all >= 10.

Exit code ranges:
    0-9: Issue count of a completed run
    10-19: Validation errors (config, input)
    20-29: Target/file errors
    40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for fatal mkv-doctor conditions."""

    # Success (0)
    SUCCESS = 0

    # Validation errors (10-19)
    USAGE_ERROR = 10
    CONFIG_ERROR = 11

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    TARGET_NOT_REGULAR = 21
    TARGET_NOT_READABLE = 22

    # Operation errors (40-49)
    FILE_LOCKED = 41
    LOCK_UNAVAILABLE = 42


# InvalidMediaFileError.reason -> exit code
MEDIA_ERROR_EXIT_CODES = {
    "not_found": ExitCode.TARGET_NOT_FOUND,
    "not_regular": ExitCode.TARGET_NOT_REGULAR,
    "not_readable": ExitCode.TARGET_NOT_READABLE,
}
