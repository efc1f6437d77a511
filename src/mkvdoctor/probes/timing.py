"""Packet timestamp probe."""

from mkvdoctor.domain.media import MediaFile, PacketInfo, PacketQuery
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder


def count_negative(timestamps: list[float]) -> int:
    return sum(1 for ts in timestamps if ts < 0)


def count_gaps(timestamps: list[float], threshold: float) -> int:
    """Count consecutive pairs whose distance exceeds ``threshold``.

    Distances are absolute, so backwards jumps count as well.
    """
    return sum(
        1
        for previous, current in zip(timestamps, timestamps[1:])
        if abs(current - previous) > threshold
    )


def count_duplicates(timestamps: list[float]) -> int:
    """Number of timestamps repeating an earlier value."""
    return len(timestamps) - len(set(timestamps))


class TimingProbe(Probe):
    """Checks packet presentation timestamps in file order."""

    name = "timing"
    description = "Packet timestamps"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        query = PacketQuery(
            read_intervals=context.config.analysis.packet_read_intervals
        )
        packets = context.introspector.get_packets(
            media, query, timeout=context.timeout("packets")
        )
        if not packets:
            rec.error("No packets found")
            return

        self.check_timestamps(packets, context.thresholds.timestamp_gap_seconds, rec)

    @staticmethod
    def check_timestamps(
        packets: list[PacketInfo], gap_threshold: float, rec: ProbeRecorder
    ) -> None:
        timestamps = [p.pts for p in packets if p.pts is not None]
        rec.note(
            f"Packets: {len(packets)} ({len(timestamps)} with timestamps)"
        )

        negative = count_negative(timestamps)
        if negative:
            rec.warning(f"{negative} negative timestamp(s)", negative)

        gaps = count_gaps(timestamps, gap_threshold)
        if gaps:
            rec.warning(
                f"{gaps} timestamp gap(s) larger than {gap_threshold:g}s", gaps
            )

        duplicates = count_duplicates(timestamps)
        if duplicates:
            rec.warning(f"{duplicates} duplicate timestamp(s)", duplicates)
