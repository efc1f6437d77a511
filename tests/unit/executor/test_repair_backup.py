"""Unit tests for backup creation and repair file locking."""

import fcntl
import os
import tempfile
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

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

NOW = datetime(2024, 3, 9, 14, 5, 7)


class TestGetBackupPath:
    """Tests for get_backup_path."""

    def test_timestamped_name(self) -> None:
        path = get_backup_path(Path("/media/movie.mkv"), now=NOW)
        assert path == Path("/media/movie.mkv.backup.20240309_140507")


class TestCreateTimestampedBackup:
    """Tests for create_timestamped_backup."""

    def test_copies_file(self, media_path: Path) -> None:
        backup = create_timestamped_backup(media_path, now=NOW)

        assert backup.name == "movie.mkv.backup.20240309_140507"
        assert backup.read_bytes() == media_path.read_bytes()
        assert media_path.exists()

    def test_replaces_existing_backup(self, media_path: Path) -> None:
        stale = get_backup_path(media_path, now=NOW)
        stale.write_bytes(b"old")

        backup = create_timestamped_backup(media_path, now=NOW)

        assert backup == stale
        assert backup.stat().st_size == media_path.stat().st_size

    def test_missing_source_raises(self, temp_dir: Path) -> None:
        with pytest.raises(BackupError, match="not found"):
            create_timestamped_backup(temp_dir / "gone.mkv", now=NOW)

    def test_copy_failure_raises(self, media_path: Path) -> None:
        with patch(
            "mkvdoctor.executor.backup.shutil.copy2",
            side_effect=PermissionError("read-only"),
        ):
            with pytest.raises(BackupError, match="read-only"):
                create_timestamped_backup(media_path, now=NOW)


class TestFileLock:
    """Tests for file_lock."""

    def test_lock_file_removed_after_release(self, media_path: Path) -> None:
        lock_path = lock_path_for(media_path)

        with file_lock(media_path):
            assert lock_path.read_text() == str(os.getpid())

        assert not lock_path.exists()

    def test_second_lock_fails(self, media_path: Path) -> None:
        with file_lock(media_path):
            with pytest.raises(FileLockError, match=f"pid {os.getpid()}"):
                with file_lock(media_path):
                    pass

    def test_lock_reacquired_after_release(self, media_path: Path) -> None:
        with file_lock(media_path):
            pass
        with file_lock(media_path):
            pass

    def test_lock_file_replaced_while_acquiring(self, media_path: Path) -> None:
        """A lock taken on an unlinked lock file should be retried."""
        lock_path = lock_path_for(media_path)
        real_flock = fcntl.flock
        exclusive_calls = []

        def flock(fd, operation):
            if operation & fcntl.LOCK_EX:
                if not exclusive_calls:
                    # Previous holder releases between our open and flock
                    lock_path.unlink()
                exclusive_calls.append(fd)
            real_flock(fd, operation)

        with patch("mkvdoctor.executor.backup.fcntl.flock", side_effect=flock):
            with file_lock(media_path):
                assert lock_path.read_text() == str(os.getpid())

        assert len(exclusive_calls) == 2
        assert not lock_path.exists()


class TestLockFallback:
    """Tests for lock files of inputs in directories that reject new files."""

    @pytest.fixture(autouse=True)
    def lock_temp_dir(self, monkeypatch, tmp_path: Path) -> Path:
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        return tmp_path

    def test_fallback_path_keyed_on_resolved_input(
        self, media_path: Path, lock_temp_dir: Path
    ) -> None:
        relative = Path(os.path.relpath(media_path))
        fallback = fallback_lock_path_for(media_path)

        assert fallback == fallback_lock_path_for(relative)
        assert fallback.parent == lock_temp_dir / "mkvdoctor-locks"
        assert fallback != fallback_lock_path_for(media_path.with_name("other.mkv"))

    def test_uses_fallback_when_beside_input_fails(
        self, media_path: Path, temp_dir: Path
    ) -> None:
        fallback = fallback_lock_path_for(media_path)
        with patch(
            "mkvdoctor.executor.backup.lock_path_for",
            return_value=temp_dir / "missing" / "movie.mkv.mkvdoctor-lock",
        ):
            with file_lock(media_path):
                assert fallback.read_text() == str(os.getpid())
                with pytest.raises(FileLockError):
                    with file_lock(media_path):
                        pass

        assert not fallback.exists()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can write anywhere")
    def test_read_only_directory(self, media_path: Path, temp_dir: Path) -> None:
        temp_dir.chmod(0o555)
        try:
            with file_lock(media_path):
                assert fallback_lock_path_for(media_path).exists()
                assert not lock_path_for(media_path).exists()
        finally:
            temp_dir.chmod(0o755)

    def test_no_writable_location(self, media_path: Path, temp_dir: Path) -> None:
        missing = temp_dir / "missing"
        with patch(
            "mkvdoctor.executor.backup.lock_path_for",
            return_value=missing / "a.lock",
        ):
            with patch(
                "mkvdoctor.executor.backup.fallback_lock_path_for",
                return_value=media_path / "b.lock",
            ):
                with pytest.raises(LockUnavailableError, match="Cannot create"):
                    with file_lock(media_path):
                        pass
