"""Stream inventory probe."""

from collections import Counter

from mkvdoctor.domain.enums import StreamType
from mkvdoctor.domain.media import MediaFile, StreamInfo
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder


def describe_stream(stream: StreamInfo) -> str:
    """One-line summary of a stream for verbose output."""
    parts = [f"#{stream.index}", stream.stream_type.value, stream.codec or "unknown"]
    if stream.stream_type == StreamType.VIDEO and stream.width and stream.height:
        parts.append(f"{stream.width}x{stream.height}")
    if stream.stream_type == StreamType.AUDIO:
        if stream.channels is not None:
            parts.append(f"{stream.channels}ch")
        if stream.sample_rate:
            parts.append(f"{stream.sample_rate}Hz")
    if stream.bit_rate:
        parts.append(f"{stream.bit_rate // 1000}kb/s")
    if stream.language:
        parts.append(f"[{stream.language}]")
    return " ".join(parts)


class StreamInventoryProbe(Probe):
    """Counts streams by type and checks each one is usable."""

    name = "streams"
    description = "Stream inventory"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        streams = context.introspector.get_streams(
            media, timeout=context.timeout("metadata")
        )
        counts = Counter(s.stream_type for s in streams)
        rec.note(
            "Streams: {} video, {} audio, {} subtitle, {} attachment".format(
                counts[StreamType.VIDEO],
                counts[StreamType.AUDIO],
                counts[StreamType.SUBTITLE],
                counts[StreamType.ATTACHMENT],
            )
        )

        if counts[StreamType.VIDEO] == 0:
            rec.warning("No video streams found")
        if counts[StreamType.AUDIO] == 0:
            rec.warning("No audio streams found")

        for stream in streams:
            rec.note(describe_stream(stream))
            if stream.codec is None:
                rec.warning(f"Stream {stream.index} has unknown codec")
            if stream.stream_type == StreamType.AUDIO and stream.channels == 0:
                rec.warning(f"Audio stream {stream.index} has no channels", 0)
            if stream.stream_type == StreamType.VIDEO and not (
                stream.width and stream.height
            ):
                rec.info(f"Video stream {stream.index} has no resolution")
