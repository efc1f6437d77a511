"""Container metadata probe."""

from collections import Counter

from mkvdoctor.domain.media import MediaFile
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder

KNOWN_TRACK_TYPES = frozenset({"video", "audio", "subtitle"})


class ContainerProbe(Probe):
    """Reports container tool warnings and errors and checks track types."""

    name = "container"
    description = "Container metadata"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        meta = context.introspector.get_container_meta(
            media, timeout=context.timeout("metadata")
        )

        for warning in meta.warnings:
            rec.warning(warning)
        for error in meta.errors:
            rec.error(error)

        types = Counter(track.track_type for track in meta.tracks)
        rec.note(
            "Tracks: "
            + (", ".join(f"{n} {t}" for t, n in sorted(types.items())) or "none")
        )
        if not types["video"]:
            rec.error("No video tracks in container")
        if not types["audio"]:
            rec.error("No audio tracks in container")

        for track in meta.tracks:
            if track.track_type not in KNOWN_TRACK_TYPES:
                rec.warning(
                    f"Track {track.track_id} has unexpected type "
                    f"'{track.track_type or 'unknown'}'"
                )
