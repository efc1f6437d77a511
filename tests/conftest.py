"""Shared test fixtures for MKV Doctor."""

import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from mkvdoctor.config.models import DoctorConfig
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.introspector.stub import StubIntrospector
from mkvdoctor.probes.base import ProbeContext


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def media_path(temp_dir: Path) -> Path:
    """A 2 MiB placeholder .mkv file."""
    path = temp_dir / "movie.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3" + b"\0" * (2 * 1024 * 1024 - 4))
    return path


@pytest.fixture
def media(media_path: Path) -> MediaFile:
    """MediaFile loaded from media_path."""
    return MediaFile.load(media_path)


@pytest.fixture
def stub() -> StubIntrospector:
    """Stub introspector describing a healthy file."""
    return StubIntrospector()


@pytest.fixture
def context(stub: StubIntrospector) -> ProbeContext:
    """Probe context with default configuration around the stub."""
    return ProbeContext(introspector=stub, config=DoctorConfig())


@pytest.fixture
def make_media():
    """Factory building a MediaFile without touching the filesystem."""

    def _make(
        path: str = "/media/movie.mkv", size: int = 50 * 1024 * 1024
    ) -> MediaFile:
        return MediaFile(
            path=Path(path),
            size_bytes=size,
            modified_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        )

    return _make
