"""Seek stress probe."""

import logging

from mkvdoctor.config.models import StressConfig
from mkvdoctor.core.formatting import format_offset
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder

logger = logging.getLogger(__name__)


def seek_plan(duration: float, stress: StressConfig) -> list[tuple[float, float]]:
    """Seek positions and decode windows for a file of ``duration`` seconds.

    Configured offsets below the duration use the short window; a final
    seek near the end uses the end window when it lands after zero.
    """
    plan = [
        (offset, stress.seek_window_seconds)
        for offset in stress.seek_offsets
        if offset < duration
    ]
    near_end = duration - stress.end_window_seconds
    if near_end > 0:
        plan.append((near_end, stress.end_window_seconds))
    return plan


class StressProbe(Probe):
    """Seeks to several positions and decodes a short window at each."""

    name = "stress"
    description = "Seek and decode stress test"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        introspector = context.introspector
        info = introspector.get_format_info(media, timeout=context.timeout("metadata"))
        duration = info.duration_seconds
        if not duration:
            rec.info("Seek test skipped: duration unknown")
            return

        timeout = context.timeout("seek")
        for position, window in seek_plan(duration, context.stress):
            logger.debug("Seek test at %s", format_offset(position))
            if introspector.seek_and_decode(media, position, window, timeout=timeout):
                rec.note(f"Seek to {format_offset(position)}: ok")
            else:
                rec.warning(f"Seek to {format_offset(position)} failed", position)
