"""Per-stream deep analysis probe.

Flags stream parameters that commonly trip up hardware decoders and
players: 4:4:4 chroma, very high codec levels, unknown pixel formats, and
audio beyond typical channel counts or sample rates.
"""

from mkvdoctor.domain.enums import Severity, StreamType
from mkvdoctor.domain.media import MediaFile, StreamInfo
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder

# ffprobe reports levels as integers on a per-codec scale:
# H.264 uses level * 10 (51 = 5.1), HEVC uses level * 30 (156 = 5.2).
LEVEL_SCALE = {
    "h264": 10,
    "hevc": 30,
}

LOSSLESS_MULTICHANNEL_CODECS = frozenset({"dts", "truehd"})


def normalized_level(stream: StreamInfo) -> float | None:
    """Codec level as a decimal (e.g. 5.1), or None if not comparable."""
    if stream.level is None or stream.codec is None:
        return None
    scale = LEVEL_SCALE.get(stream.codec.casefold())
    if scale is None:
        return None
    return stream.level / scale


class DeepStreamProbe(Probe):
    name = "deep-stream"
    description = "Deep stream parameters"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        streams = context.introspector.get_streams(
            media, timeout=context.timeout("metadata")
        )
        thresholds = context.thresholds

        for stream in streams:
            if stream.stream_type == StreamType.VIDEO:
                self._check_video(stream, thresholds.max_video_level, rec)
            elif stream.stream_type == StreamType.AUDIO:
                self._check_audio(stream, context, rec)

        issues = sum(1 for f in rec.findings if f.severity >= Severity.WARNING)
        rec.note(f"Deep stream issues: {issues}")
        if issues:
            rec.info(f"{issues} stream parameter issue(s) found", issues)

    def _check_video(
        self, stream: StreamInfo, max_level: float, rec: ProbeRecorder
    ) -> None:
        if stream.profile and "4:4:4" in stream.profile:
            rec.warning(
                f"Video stream {stream.index} uses 4:4:4 profile ({stream.profile})"
            )
        level = normalized_level(stream)
        if level is not None and level >= max_level:
            rec.warning(
                f"Video stream {stream.index} uses high level {level:g}", level
            )
        if stream.pixel_format is None:
            rec.warning(f"Video stream {stream.index} has unknown pixel format")

    def _check_audio(
        self, stream: StreamInfo, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        thresholds = context.thresholds
        channels = stream.channels or 0
        if channels > thresholds.max_audio_channels:
            rec.warning(
                f"Audio stream {stream.index} has {channels} channels", channels
            )
        if stream.sample_rate and stream.sample_rate > thresholds.max_sample_rate:
            rec.warning(
                f"Audio stream {stream.index} has high sample rate "
                f"{stream.sample_rate} Hz",
                stream.sample_rate,
            )
        codec = (stream.codec or "").casefold()
        if (
            codec in LOSSLESS_MULTICHANNEL_CODECS
            and channels > thresholds.lossless_channel_limit
        ):
            rec.warning(
                f"Audio stream {stream.index} is {codec} with {channels} channels",
                channels,
            )
