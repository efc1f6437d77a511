"""Backup creation and file locking utilities for repair.

Backups are full copies placed beside the input, named
``<input>.backup.<YYYYMMDD_HHMMSS>``.
"""

import fcntl
import hashlib
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

# Backup file infix, followed by a timestamp
BACKUP_INFIX = ".backup."

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Lock file suffix
LOCK_SUFFIX = ".mkvdoctor-lock"

# Temp subdirectory for locks of inputs in read-only directories
LOCK_DIR_NAME = "mkvdoctor-locks"


class FileLockError(Exception):
    """Error acquiring file lock (file is being repaired by another process)."""

    pass


class LockUnavailableError(Exception):
    """Raised when no lock file can be created for a file."""

    pass


class BackupError(Exception):
    """Raised when a backup copy cannot be created."""

    pass


def lock_path_for(file_path: Path) -> Path:
    """Lock file guarding repairs of ``file_path``."""
    return file_path.with_name(file_path.name + LOCK_SUFFIX)


def fallback_lock_path_for(file_path: Path) -> Path:
    """Lock file in the temp directory, keyed on the resolved input path.

    Used when the input's directory does not accept new files.
    """
    digest = hashlib.sha256(str(file_path.resolve()).encode()).hexdigest()[:16]
    return Path(tempfile.gettempdir()) / LOCK_DIR_NAME / f"{digest}{LOCK_SUFFIX}"


def _open_lock_file(file_path: Path) -> tuple[Path, IO[str]]:
    """Open the lock file beside the input, or the fallback one.

    Raises:
        LockUnavailableError: Neither location is writable.
    """
    lock_path = lock_path_for(file_path)
    try:
        return lock_path, open(lock_path, "a+", encoding="utf-8")
    except OSError as e:
        logger.info(
            "Cannot create lock file %s (%s), using temp directory", lock_path, e
        )

    fallback = fallback_lock_path_for(file_path)
    try:
        fallback.parent.mkdir(parents=True, exist_ok=True)
        return fallback, open(fallback, "a+", encoding="utf-8")
    except OSError as e:
        raise LockUnavailableError(
            f"Cannot create lock file for {file_path}: {e}"
        ) from e


def _acquire(file_path: Path) -> tuple[Path, IO[str]]:
    """Open and flock the lock file, retrying if it was replaced meanwhile.

    A releasing holder unlinks the lock file before unlocking it, so a lock
    taken on an unlinked inode is stale and the file is opened again.
    """
    while True:
        lock_path, handle = _open_lock_file(file_path)
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            handle.seek(0)
            holder = handle.read().strip() or "unknown"
            handle.close()
            raise FileLockError(
                f"File is being repaired by another process (pid {holder}): "
                f"{file_path}"
            ) from e

        try:
            current = os.stat(lock_path)
        except FileNotFoundError:
            current = None
        if current is not None and os.path.samestat(
            current, os.fstat(handle.fileno())
        ):
            return lock_path, handle
        logger.debug("Lock file %s was replaced, retrying", lock_path)
        handle.close()


@contextmanager
def file_lock(file_path: Path) -> Iterator[None]:
    """Hold an exclusive, non-blocking repair lock on ``file_path``.

    The lock file sits beside the input, or in the temp directory when the
    input's directory is read-only, and records the holder's PID. It is
    removed on release, but only by the process that acquired it.

    Raises:
        FileLockError: Another process holds the lock.
        LockUnavailableError: No lock file could be created.
    """
    lock_path, handle = _acquire(file_path)
    try:
        handle.seek(0)
        handle.truncate()
        handle.write(str(os.getpid()))
        handle.flush()
        logger.debug("Acquired repair lock %s", lock_path)
        yield
    finally:
        # Unlinked while still locked, so waiting openers see a new inode
        try:
            lock_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove lock file %s: %s", lock_path, e)
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        handle.close()


def get_backup_path(file_path: Path, now: datetime | None = None) -> Path:
    """Get the timestamped backup path for a file.

    Args:
        file_path: Path to the original file.
        now: Timestamp to embed (default: current local time).

    Returns:
        Path where the backup would be stored.
    """
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return file_path.with_name(f"{file_path.name}{BACKUP_INFIX}{stamp}")


def create_timestamped_backup(file_path: Path, now: datetime | None = None) -> Path:
    """Copy a file to its timestamped backup path.

    Args:
        file_path: Path to the file to back up.
        now: Timestamp to embed (default: current local time).

    Returns:
        Path to the created backup file.

    Raises:
        BackupError: If the source is missing or the copy fails.
    """
    if not file_path.exists():
        raise BackupError(f"Cannot backup: file not found: {file_path}")

    backup_path = get_backup_path(file_path, now)

    try:
        # A backup from the same second is replaced
        if backup_path.exists():
            backup_path.unlink()
            logger.debug(
                "Removed existing backup",
                extra={"backup_path": str(backup_path)},
            )

        logger.debug(
            "Creating backup",
            extra={
                "source_path": str(file_path),
                "backup_path": str(backup_path),
                "file_size_bytes": file_path.stat().st_size,
            },
        )
        shutil.copy2(file_path, backup_path)
    except OSError as e:
        raise BackupError(f"Cannot create backup {backup_path}: {e}") from e

    logger.info("Backup created: %s", backup_path)
    return backup_path
