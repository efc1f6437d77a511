"""Mode controller: selects and sequences probes per analysis mode.

Probe order is fixed per mode and results are always reported in that
order, whether probes run sequentially or on a thread pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from mkvdoctor.analysis.aggregator import build_report
from mkvdoctor.domain.enums import AnalysisMode
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.domain.models import AnalysisReport, ProbeResult, QuickCheckResult
from mkvdoctor.probes import (
    AVSyncProbe,
    CompatibilityProbe,
    ContainerProbe,
    DeepStreamProbe,
    IntegrityProbe,
    Probe,
    ProbeContext,
    StreamInventoryProbe,
    StressProbe,
    StructuralProbe,
    TimingProbe,
)

logger = logging.getLogger(__name__)

QUICK_PROBES: tuple[type[Probe], ...] = (StructuralProbe, StreamInventoryProbe)

FULL_PROBES: tuple[type[Probe], ...] = (
    StructuralProbe,
    StreamInventoryProbe,
    IntegrityProbe,
    AVSyncProbe,
    DeepStreamProbe,
    TimingProbe,
    ContainerProbe,
    CompatibilityProbe,
)

# Probes belonging to the deep tier. Deep mode runs every full probe and
# then each of these not already run.
DEEP_TIER_PROBES: tuple[type[Probe], ...] = (
    DeepStreamProbe,
    TimingProbe,
    ContainerProbe,
    CompatibilityProbe,
    StressProbe,
)


def probes_for_mode(mode: AnalysisMode) -> tuple[type[Probe], ...]:
    """Probe classes run by a mode, in execution order."""
    if mode == AnalysisMode.QUICK:
        return QUICK_PROBES
    if mode == AnalysisMode.FULL:
        return FULL_PROBES
    return FULL_PROBES + tuple(p for p in DEEP_TIER_PROBES if p not in FULL_PROBES)


class ModeController:
    """Runs the probes of an analysis mode against one file."""

    def __init__(self, context: ProbeContext, workers: int | None = None) -> None:
        """Initialize the controller.

        Args:
            context: Introspector and configuration shared by all probes.
            workers: Maximum concurrent probes. Defaults to
                ``analysis.workers`` from the configuration; 1 runs probes
                sequentially.
        """
        self.context = context
        self.workers = max(1, workers or context.config.analysis.workers)

    def quick_check(self, media: MediaFile) -> QuickCheckResult:
        """Minimal-cost pass/fail check."""
        results = self._run_probes(media, QUICK_PROBES)
        return QuickCheckResult(media_file=media, results=tuple(results))

    def full_analysis(self, media: MediaFile) -> AnalysisReport:
        return self.analyze(media, AnalysisMode.FULL)

    def deep_analysis(self, media: MediaFile) -> AnalysisReport:
        return self.analyze(media, AnalysisMode.DEEP)

    def analyze(self, media: MediaFile, mode: AnalysisMode) -> AnalysisReport:
        """Run every probe of ``mode`` and aggregate the results.

        Every probe runs even when earlier ones fail.
        """
        probe_classes = probes_for_mode(mode)
        logger.info(
            "Starting %s analysis of %s (%d probes)",
            mode.value,
            media.path,
            len(probe_classes),
        )
        report = build_report(mode, media, self._run_probes(media, probe_classes))
        logger.info(
            "Analysis complete: %d of %d probes reported issues",
            report.total_issues,
            report.probes_run,
        )
        return report

    def _run_probes(
        self, media: MediaFile, probe_classes: tuple[type[Probe], ...]
    ) -> list[ProbeResult]:
        probes = [cls() for cls in probe_classes]
        if self.workers == 1 or len(probes) == 1:
            return [probe.run(media, self.context) for probe in probes]

        results: list[ProbeResult | None] = [None] * len(probes)
        with ThreadPoolExecutor(
            max_workers=min(self.workers, len(probes)),
            thread_name_prefix="probe",
        ) as executor:
            futures = {
                executor.submit(probe.run, media, self.context): index
                for index, probe in enumerate(probes)
            }
            for future in as_completed(futures):
                # Probe.run never raises
                results[futures[future]] = future.result()

        return [r for r in results if r is not None]
