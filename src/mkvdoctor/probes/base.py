"""Base classes for analysis probes.

A probe inspects one aspect of a media file and reports findings. Probes
subclass ``Probe`` and implement ``check``, recording findings on the
``ProbeRecorder`` they are handed. The base ``run`` method owns the probe
boundary: introspection failures and unexpected errors become Warning
findings, so one broken probe never stops the others.

Example:
    class DurationProbe(Probe):
        name = "duration"

        def check(self, media, context, rec):
            info = context.introspector.get_format_info(
                media, timeout=context.timeout("metadata")
            )
            if info.duration_seconds is None:
                rec.warning("Duration unknown")
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from mkvdoctor.config.models import (
    DoctorConfig,
    StressConfig,
    ThresholdsConfig,
    TimeoutsConfig,
)
from mkvdoctor.domain.enums import Severity
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.domain.models import Finding, ProbeResult
from mkvdoctor.introspector.interface import MediaIntrospectionError, MediaIntrospector
from mkvdoctor.logging.context import probe_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeContext:
    """Everything a probe needs besides the file itself."""

    introspector: MediaIntrospector
    config: DoctorConfig = field(default_factory=DoctorConfig)

    @property
    def thresholds(self) -> ThresholdsConfig:
        return self.config.thresholds

    @property
    def stress(self) -> StressConfig:
        return self.config.stress

    def timeout(self, kind: str) -> int | None:
        """Subprocess timeout for a call kind ("metadata", "decode", ...)."""
        return TimeoutsConfig.effective(getattr(self.config.timeouts, kind))


class ProbeRecorder:
    """Collects findings and verbose diagnostics for one probe run."""

    def __init__(self, probe: str) -> None:
        self.probe = probe
        self.findings: list[Finding] = []
        self.diagnostics: list[str] = []

    def add(
        self, severity: Severity, message: str, detail: float | None = None
    ) -> None:
        self.findings.append(Finding(self.probe, severity, message, detail))

    def info(self, message: str, detail: float | None = None) -> None:
        self.add(Severity.INFO, message, detail)

    def warning(self, message: str, detail: float | None = None) -> None:
        self.add(Severity.WARNING, message, detail)

    def error(self, message: str, detail: float | None = None) -> None:
        self.add(Severity.ERROR, message, detail)

    def note(self, line: str) -> None:
        """Record a line shown only in verbose output."""
        self.diagnostics.append(line)

    def result(self) -> ProbeResult:
        return ProbeResult.from_findings(self.probe, self.findings, self.diagnostics)


class Probe(ABC):
    """Base class for analysis probes.

    Required attributes:
        name: str - Unique probe identifier, used in reports and logs

    Optional attributes:
        description: str - One-line summary shown in verbose output
    """

    name: str
    description: str = ""

    def run(self, media: MediaFile, context: ProbeContext) -> ProbeResult:
        """Run the probe and return its result. Never raises.

        Args:
            media: File under analysis.
            context: Introspector, configuration and timeouts.

        Returns:
            ProbeResult with findings in the order they were recorded.
        """
        rec = ProbeRecorder(self.name)
        with probe_context(self.name, media.path):
            logger.debug("Running probe")
            try:
                self.check(media, context, rec)
            except MediaIntrospectionError as e:
                logger.warning("Probe %s could not run: %s", self.name, e)
                rec.warning(f"Unable to complete {self.name} check: {e}")
            except Exception as e:
                logger.exception("Unexpected error in probe %s", self.name)
                rec.warning(f"Unexpected error in {self.name} check: {e}")
        result = rec.result()
        logger.debug(
            "Probe %s finished: passed=%s findings=%d",
            self.name,
            result.passed,
            len(result.findings),
        )
        return result

    @abstractmethod
    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        """Inspect the file and record findings on ``rec``.

        Raises:
            MediaIntrospectionError: If the introspector fails. ``run``
                converts this into a Warning finding.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
