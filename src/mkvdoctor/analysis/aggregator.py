"""Report aggregation."""

from collections.abc import Iterable

from mkvdoctor.domain.enums import AnalysisMode
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.domain.models import AnalysisReport, ProbeResult


def count_issues(results: Iterable[ProbeResult]) -> int:
    """Number of probes that did not pass."""
    return sum(1 for result in results if not result.passed)


def build_report(
    mode: AnalysisMode, media: MediaFile, results: Iterable[ProbeResult]
) -> AnalysisReport:
    """Assemble a report from probe results, preserving their order.

    Args:
        mode: Analysis mode that produced the results.
        media: File analyzed.
        results: Probe results in execution order.

    Returns:
        AnalysisReport whose total_issues counts failing probes.
    """
    results = tuple(results)
    return AnalysisReport(
        mode=mode,
        media_file=media,
        results=results,
        total_issues=count_issues(results),
    )
