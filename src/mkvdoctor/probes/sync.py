"""Audio/video start-time sync probe."""

from mkvdoctor.domain.enums import StreamType
from mkvdoctor.domain.media import MediaFile, StreamInfo
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder


def _first(streams: list[StreamInfo], stream_type: StreamType) -> StreamInfo | None:
    return next((s for s in streams if s.stream_type == stream_type), None)


class AVSyncProbe(Probe):
    """Compares the start times of the first video and audio streams."""

    name = "sync"
    description = "Audio/video sync"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        streams = context.introspector.get_streams(
            media, timeout=context.timeout("metadata")
        )
        video = _first(streams, StreamType.VIDEO)
        audio = _first(streams, StreamType.AUDIO)
        if video is None or audio is None:
            rec.info("Sync check skipped: needs both a video and an audio stream")
            return

        video_start = video.start_time or 0.0
        audio_start = audio.start_time or 0.0
        offset = abs(video_start - audio_start)
        rec.note(
            f"Video start {video_start:.3f}s, audio start {audio_start:.3f}s, "
            f"offset {offset:.3f}s"
        )

        thresholds = context.thresholds
        if offset > thresholds.sync_error_seconds:
            rec.error(f"Severe A/V sync offset: {offset:.3f}s", offset)
        elif offset > thresholds.sync_warning_seconds:
            rec.warning(f"A/V sync offset: {offset:.3f}s", offset)
