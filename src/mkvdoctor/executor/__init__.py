"""Execution layer module for MKV Doctor.

This module provides tool resolution and repair utilities:
- interface: external tool lookup and availability checks
- backup: timestamped backups and repair file locking
- remux: error-tolerant FFmpeg remux and RepairExecutor

``remux`` depends on the probes package and is imported directly as
``mkvdoctor.executor.remux``.
"""

from mkvdoctor.executor.backup import (
    BackupError,
    FileLockError,
    LockUnavailableError,
    create_timestamped_backup,
    fallback_lock_path_for,
    file_lock,
    get_backup_path,
    lock_path_for,
)
from mkvdoctor.executor.interface import (
    REQUIRED_TOOLS,
    ToolNotAvailableError,
    check_tool_availability,
    get_tool_path,
    require_tool,
)

__all__ = [
    # Interface
    "REQUIRED_TOOLS",
    "ToolNotAvailableError",
    "check_tool_availability",
    "get_tool_path",
    "require_tool",
    # Backup
    "BackupError",
    "FileLockError",
    "LockUnavailableError",
    "create_timestamped_backup",
    "fallback_lock_path_for",
    "file_lock",
    "get_backup_path",
    "lock_path_for",
]
