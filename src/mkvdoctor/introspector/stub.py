"""Stub implementation of MediaIntrospector for development and testing."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from mkvdoctor.domain.enums import StreamType
from mkvdoctor.domain.media import (
    ContainerElements,
    ContainerMeta,
    ContainerStructure,
    DecodeVerdict,
    FormatInfo,
    MediaFile,
    PacketInfo,
    PacketQuery,
    StreamInfo,
    TrackSummary,
)


def healthy_streams() -> list[StreamInfo]:
    """One H.264 video stream and one stereo AAC audio stream."""
    return [
        StreamInfo(
            index=0,
            stream_type=StreamType.VIDEO,
            codec="h264",
            profile="High",
            level=41,
            pixel_format="yuv420p",
            width=1920,
            height=1080,
            start_time=0.0,
        ),
        StreamInfo(
            index=1,
            stream_type=StreamType.AUDIO,
            codec="aac",
            profile="LC",
            channels=2,
            channel_layout="stereo",
            sample_rate=48000,
            start_time=0.0,
            language="eng",
        ),
    ]


def healthy_structure() -> ContainerStructure:
    return ContainerStructure(
        elements=ContainerElements(
            ebml_header=True, segment=True, tracks=True, clusters=True
        )
    )


def healthy_container() -> ContainerMeta:
    return ContainerMeta(
        tracks=(
            TrackSummary(track_id=0, track_type="video", codec="AVC/H.264/MPEG-4p10"),
            TrackSummary(track_id=1, track_type="audio", codec="AAC"),
        ),
    )


def healthy_packets() -> list[PacketInfo]:
    """Interleaved packets at steady timestamps."""
    return [
        PacketInfo(pts=i * 0.5, stream_index=i % 2) for i in range(20)
    ]


@dataclass
class StubIntrospector:
    """Stub implementation returning canned metadata.

    Defaults describe a small, healthy Matroska file. Tests override
    individual fields, or inject failures by method name::

        stub = StubIntrospector(failures={"verify_decode": MediaIntrospectionError("x")})

    Every call is recorded in ``calls`` as ``(method, args)``.
    """

    format_info: FormatInfo = field(
        default_factory=lambda: FormatInfo(
            format_name="matroska,webm",
            duration_seconds=600.0,
            size_bytes=50 * 1024 * 1024,
            tags={"title": "Sample"},
        )
    )
    streams: list[StreamInfo] = field(default_factory=healthy_streams)
    packets: list[PacketInfo] = field(default_factory=healthy_packets)
    decode: DecodeVerdict = field(default_factory=lambda: DecodeVerdict(ok=True))
    structure: ContainerStructure = field(default_factory=healthy_structure)
    container: ContainerMeta = field(default_factory=healthy_container)
    failed_seeks: set[float] = field(default_factory=set)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[tuple[str, tuple]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _record(self, method: str, *args: object) -> None:
        with self._lock:
            self.calls.append((method, args))
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    def calls_to(self, method: str) -> list[tuple]:
        """Arguments of every recorded call to ``method``."""
        return [args for name, args in self.calls if name == method]

    def get_format_info(
        self, media: MediaFile, timeout: float | None = None
    ) -> FormatInfo:
        self._record("get_format_info", media.path)
        return self.format_info

    def get_streams(
        self, media: MediaFile, timeout: float | None = None
    ) -> list[StreamInfo]:
        self._record("get_streams", media.path)
        return list(self.streams)

    def get_packets(
        self,
        media: MediaFile,
        query: PacketQuery | None = None,
        timeout: float | None = None,
    ) -> list[PacketInfo]:
        self._record("get_packets", media.path, query)
        return list(self.packets)

    def verify_decode(
        self, media: MediaFile, timeout: float | None = None
    ) -> DecodeVerdict:
        self._record("verify_decode", media.path)
        return self.decode

    def get_container_structure(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerStructure:
        self._record("get_container_structure", media.path)
        return self.structure

    def get_container_meta(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerMeta:
        self._record("get_container_meta", media.path)
        return self.container

    def seek_and_decode(
        self,
        media: MediaFile,
        position: float,
        duration: float,
        timeout: float | None = None,
    ) -> bool:
        self._record("seek_and_decode", media.path, position, duration)
        return position not in self.failed_seeks
