"""Player compatibility probe.

Flags properties that are valid Matroska but are poorly supported by older
players and streaming devices.
"""

from mkvdoctor.core.formatting import format_duration, format_file_size
from mkvdoctor.domain.enums import StreamType
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder

LIMITED_VIDEO_CODECS = frozenset({"hevc", "h265", "vp9", "av1"})
LIMITED_AUDIO_CODECS = frozenset({"opus", "flac"})
CHECKED_TAGS = ("title", "artist")

GIB = 1024**3


class CompatibilityProbe(Probe):
    name = "compatibility"
    description = "Player compatibility"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        timeout = context.timeout("metadata")
        info = context.introspector.get_format_info(media, timeout=timeout)
        streams = context.introspector.get_streams(media, timeout=timeout)
        thresholds = context.thresholds

        duration = info.duration_seconds
        if duration is not None and duration > thresholds.max_duration_hours * 3600:
            rec.warning(f"Very long duration: {format_duration(duration)}", duration)

        size = info.size_bytes if info.size_bytes is not None else media.size_bytes
        if size > thresholds.max_file_size_gb * GIB:
            rec.warning(f"Very large file: {format_file_size(size)}", size)

        for tag in CHECKED_TAGS:
            value = info.tag(tag)
            if value is not None and len(value) > thresholds.max_tag_length:
                rec.warning(
                    f"Tag '{tag}' is {len(value)} characters long", len(value)
                )

        for stream in streams:
            codec = (stream.codec or "").casefold()
            if stream.stream_type == StreamType.VIDEO and codec in LIMITED_VIDEO_CODECS:
                rec.warning(
                    f"Video stream {stream.index} uses {codec}, "
                    "which older players may not support"
                )
            elif (
                stream.stream_type == StreamType.AUDIO
                and codec in LIMITED_AUDIO_CODECS
            ):
                rec.warning(
                    f"Audio stream {stream.index} uses {codec}, "
                    "which older players may not support"
                )
