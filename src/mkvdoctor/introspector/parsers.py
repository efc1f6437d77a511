"""Pure parsing functions for external tool output.

These functions transform ffprobe JSON, ffmpeg decoder diagnostics, mkvinfo
text and mkvmerge identification JSON into domain objects. All functions are
pure (no I/O, no side effects) for easy testing.
"""

import logging
import re

from mkvdoctor.domain.enums import CorruptionSignature, StreamType
from mkvdoctor.domain.media import (
    ContainerElements,
    FormatInfo,
    PacketInfo,
    StreamInfo,
    TrackSummary,
)

logger = logging.getLogger(__name__)

# Decoder diagnostic substrings, checked in this order
CORRUPTION_PATTERNS: tuple[tuple[str, CorruptionSignature], ...] = (
    ("Invalid data found", CorruptionSignature.INVALID_DATA),
    ("Error while decoding", CorruptionSignature.DECODE_ERROR),
    ("Invalid timestamp", CorruptionSignature.INVALID_TIMESTAMP),
    ("Packet too large", CorruptionSignature.OVERSIZED_PACKET),
)

# mkvinfo prefixes each element with a tree of "|", " " and "+"
_MKVINFO_TREE_PREFIX = re.compile(r"^[|\s]*\+\s*")

# mkvmerge reports "subtitles"; the probes speak of "subtitle"
_TRACK_TYPE_ALIASES = {"subtitles": "subtitle"}


def sanitize_string(value: str | None) -> str | None:
    """Sanitize a string by replacing invalid UTF-8 characters."""
    if value is None:
        return None
    return value.encode("utf-8", errors="replace").decode("utf-8")


def parse_int(value: object) -> int | None:
    """Parse an ffprobe integer field, which may be an int or a numeric string.

    Returns:
        Integer value, or None if missing, unparseable or negative.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        logger.debug("Unparseable integer value: %r", value)
        return None
    return parsed if parsed >= 0 else None


def parse_float(value: object) -> float | None:
    """Parse an ffprobe float field such as "3600.000" or "N/A".

    Negative values are preserved (start times and timestamps can be
    legitimately negative).
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def map_stream_type(codec_type: str | None) -> StreamType:
    """Map an ffprobe codec_type to a StreamType."""
    try:
        return StreamType((codec_type or "").casefold())
    except ValueError:
        return StreamType.OTHER


def parse_format(data: dict) -> FormatInfo:
    """Parse the "format" section of ffprobe JSON output.

    Args:
        data: Full ffprobe JSON document.

    Returns:
        FormatInfo domain object.
    """
    fmt = data.get("format") or {}
    tags = {
        str(key): sanitize_string(str(value)) or ""
        for key, value in (fmt.get("tags") or {}).items()
    }
    duration = parse_float(fmt.get("duration"))
    return FormatInfo(
        format_name=fmt.get("format_name"),
        duration_seconds=duration if duration is not None and duration >= 0 else None,
        size_bytes=parse_int(fmt.get("size")),
        tags=tags,
    )


def parse_stream(stream: dict) -> StreamInfo:
    """Parse a single ffprobe stream dict into a StreamInfo.

    ffprobe reports an unknown level as -99 and unknown values as "unknown";
    both become None.
    """
    tags = stream.get("tags") or {}
    language = tags.get("language") or tags.get("LANGUAGE")

    profile = stream.get("profile")
    if profile in ("unknown", ""):
        profile = None
    pix_fmt = stream.get("pix_fmt")
    if pix_fmt in ("unknown", ""):
        pix_fmt = None
    codec = stream.get("codec_name")
    if codec in ("unknown", ""):
        codec = None

    return StreamInfo(
        index=stream.get("index", 0),
        stream_type=map_stream_type(stream.get("codec_type")),
        codec=codec,
        profile=profile,
        level=parse_int(stream.get("level")),
        pixel_format=pix_fmt,
        channels=parse_int(stream.get("channels")),
        channel_layout=stream.get("channel_layout"),
        sample_rate=parse_int(stream.get("sample_rate")),
        width=parse_int(stream.get("width")),
        height=parse_int(stream.get("height")),
        start_time=parse_float(stream.get("start_time")),
        duration_seconds=parse_float(stream.get("duration")),
        bit_rate=parse_int(stream.get("bit_rate")),
        language=sanitize_string(language),
    )


def parse_streams(data: dict) -> list[StreamInfo]:
    """Parse the "streams" section of ffprobe JSON output, in index order."""
    streams = [parse_stream(s) for s in data.get("streams") or []]
    return sorted(streams, key=lambda s: s.index)


def parse_packets(data: dict) -> list[PacketInfo]:
    """Parse the "packets" section of ffprobe JSON output.

    Order is preserved exactly as the packets appear in the file. Packets
    without a presentation timestamp keep ``pts=None``.
    """
    packets = []
    for packet in data.get("packets") or []:
        packets.append(
            PacketInfo(
                pts=parse_float(packet.get("pts_time")),
                stream_index=packet.get("stream_index"),
            )
        )
    return packets


def classify_decode_diagnostics(text: str) -> tuple[CorruptionSignature, ...]:
    """Match decoder diagnostics against known corruption signatures.

    Args:
        text: Decoder stderr output.

    Returns:
        Matched signatures, each at most once, in CORRUPTION_PATTERNS order.
    """
    return tuple(
        signature for pattern, signature in CORRUPTION_PATTERNS if pattern in text
    )


def _mkvinfo_element_name(line: str) -> str | None:
    """Extract the lowercase element name from one mkvinfo line."""
    if "+" not in line:
        return None
    name = _MKVINFO_TREE_PREFIX.sub("", line, count=1)
    name = re.split(r"[:,(]", name, maxsplit=1)[0]
    return name.strip().casefold() or None


def parse_mkvinfo_structure(text: str) -> ContainerElements:
    """Detect top-level Matroska elements in mkvinfo output.

    Recognizes both the current ("Tracks") and legacy ("Segment tracks")
    spelling of the tracks element.
    """
    ebml = segment = tracks = clusters = False
    for line in text.splitlines():
        name = _mkvinfo_element_name(line)
        if name is None:
            continue
        if name.startswith("ebml head"):
            ebml = True
        elif name == "segment":
            segment = True
        elif name in ("tracks", "segment tracks"):
            tracks = True
        elif name.startswith("cluster"):
            clusters = True
    return ContainerElements(
        ebml_header=ebml, segment=segment, tracks=tracks, clusters=clusters
    )


def parse_mkvmerge_identification(
    data: dict,
) -> tuple[tuple[TrackSummary, ...], tuple[str, ...], tuple[str, ...]]:
    """Parse ``mkvmerge -J`` output.

    Returns:
        Tuple of (tracks, warnings, errors). An unrecognized container is
        reported as an error.
    """
    tracks = tuple(
        TrackSummary(
            track_id=track.get("id", i),
            track_type=_TRACK_TYPE_ALIASES.get(
                str(track.get("type", "")).casefold(),
                str(track.get("type", "")).casefold(),
            ),
            codec=track.get("codec"),
        )
        for i, track in enumerate(data.get("tracks") or [])
    )
    warnings = tuple(str(w) for w in data.get("warnings") or [])
    errors = [str(e) for e in data.get("errors") or []]

    container = data.get("container") or {}
    if container and not container.get("recognized", True):
        errors.append("Container format not recognized")

    return tracks, warnings, tuple(errors)
