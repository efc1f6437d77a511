"""Media domain models for MKV Doctor.

These models describe the file under analysis and the typed structures
returned by a MediaIntrospector. They are independent of the external
tools that produce them.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from mkvdoctor.domain.enums import CorruptionSignature, StreamType


class InvalidMediaFileError(Exception):
    """Raised when the input path cannot be analyzed at all.

    Attributes:
        reason: Short machine-readable reason ("not_found", "not_regular",
            "not_readable").
    """

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True)
class MediaFile:
    """A file selected for analysis.

    Loaded once per invocation and never mutated by probes.
    """

    path: Path
    size_bytes: int
    modified_at: datetime

    @classmethod
    def load(cls, path: Path) -> MediaFile:
        """Stat and validate a path.

        Args:
            path: Path to the media file.

        Returns:
            MediaFile snapshot of the path.

        Raises:
            InvalidMediaFileError: If the path is missing, not a regular
                file, or not readable.
        """
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise InvalidMediaFileError(
                f"File does not exist: {path}", "not_found"
            ) from e
        except OSError as e:
            raise InvalidMediaFileError(
                f"Cannot access file {path}: {e}", "not_readable"
            ) from e

        if not stat.S_ISREG(st.st_mode):
            raise InvalidMediaFileError(
                f"Not a regular file: {path}", "not_regular"
            )
        if not os.access(path, os.R_OK):
            raise InvalidMediaFileError(
                f"File is not readable: {path}", "not_readable"
            )

        return cls(
            path=path,
            size_bytes=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    @property
    def cache_key(self) -> tuple[str, int, float]:
        """Identity of this file state, used to memoize tool output."""
        return (str(self.path), self.size_bytes, self.modified_at.timestamp())


@dataclass(frozen=True)
class FormatInfo:
    """Container-level information from the media probe tool."""

    format_name: str | None = None
    duration_seconds: float | None = None
    size_bytes: int | None = None
    tags: dict[str, str] = field(default_factory=dict)

    def tag(self, name: str) -> str | None:
        """Look up a tag case-insensitively (MKV tags are often uppercase)."""
        wanted = name.casefold()
        for key, value in self.tags.items():
            if key.casefold() == wanted:
                return value
        return None


@dataclass(frozen=True)
class StreamInfo:
    """One elementary stream."""

    index: int
    stream_type: StreamType
    codec: str | None = None
    profile: str | None = None
    level: int | None = None
    pixel_format: str | None = None
    channels: int | None = None
    channel_layout: str | None = None
    sample_rate: int | None = None
    width: int | None = None
    height: int | None = None
    start_time: float | None = None
    duration_seconds: float | None = None
    bit_rate: int | None = None
    language: str | None = None


@dataclass(frozen=True)
class PacketQuery:
    """Options for packet enumeration.

    Attributes:
        stream_selector: ffprobe stream specifier (e.g. "v:0"), None for all.
        read_intervals: ffprobe read interval (e.g. "%+120"), None for the
            whole file.
    """

    stream_selector: str | None = None
    read_intervals: str | None = None


@dataclass(frozen=True)
class PacketInfo:
    """Timing sample for one demuxed packet."""

    pts: float | None
    stream_index: int | None = None


@dataclass(frozen=True)
class DecodeVerdict:
    """Result of a full decode pass.

    Signature classification happens once in the introspector adapter so
    probes never parse decoder text.
    """

    ok: bool
    diagnostic_text: str = ""
    signatures: tuple[CorruptionSignature, ...] = ()


@dataclass(frozen=True)
class ContainerElements:
    """Presence flags for the top-level Matroska structure."""

    ebml_header: bool = False
    segment: bool = False
    tracks: bool = False
    clusters: bool = False

    def missing(self) -> list[str]:
        """Human-readable names of absent elements, in structural order."""
        names = []
        if not self.ebml_header:
            names.append("EBML header")
        if not self.segment:
            names.append("segment")
        if not self.tracks:
            names.append("tracks")
        if not self.clusters:
            names.append("clusters")
        return names


@dataclass(frozen=True)
class TrackSummary:
    """A track as reported by the container metadata tool."""

    track_id: int
    track_type: str
    codec: str | None = None


@dataclass(frozen=True)
class ContainerStructure:
    """Matroska element layout as shown by mkvinfo."""

    elements: ContainerElements = field(default_factory=ContainerElements)
    structure_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContainerMeta:
    """Track list and diagnostics from mkvmerge identification."""

    tracks: tuple[TrackSummary, ...] = ()
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
