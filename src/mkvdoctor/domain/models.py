"""Analysis and repair models for MKV Doctor.

Findings, probe results and reports are frozen dataclasses: a report is
built once per run and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from mkvdoctor.domain.enums import AnalysisMode, RepairStrategy, Severity
from mkvdoctor.domain.media import MediaFile


@dataclass(frozen=True)
class Finding:
    """A single observation raised by a probe."""

    probe: str
    severity: Severity
    message: str
    detail: float | None = None
    """Optional numeric detail (channel count, seconds, packet count)."""


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe run."""

    probe: str
    findings: tuple[Finding, ...] = ()
    passed: bool = True
    diagnostics: tuple[str, ...] = ()
    """Extra lines shown only in verbose rendering."""

    @classmethod
    def from_findings(
        cls,
        probe: str,
        findings: list[Finding] | tuple[Finding, ...],
        diagnostics: list[str] | tuple[str, ...] = (),
    ) -> ProbeResult:
        """Build a result whose pass flag is derived from its findings.

        A probe fails if any finding is at least a Warning.
        """
        findings = tuple(findings)
        passed = all(f.severity < Severity.WARNING for f in findings)
        return cls(
            probe=probe,
            findings=findings,
            passed=passed,
            diagnostics=tuple(diagnostics),
        )

    @property
    def issue_count(self) -> int:
        """Number of findings at Warning level or above."""
        return sum(1 for f in self.findings if f.severity >= Severity.WARNING)


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregated result of a full or deep analysis run.

    ``total_issues`` counts failing probes, not findings: a probe raising five
    findings counts once.
    """

    mode: AnalysisMode
    media_file: MediaFile
    results: tuple[ProbeResult, ...]
    total_issues: int

    @property
    def passed(self) -> bool:
        return self.total_issues == 0

    @property
    def probes_run(self) -> int:
        return len(self.results)

    def failed_probes(self) -> list[str]:
        return [r.probe for r in self.results if not r.passed]


@dataclass(frozen=True)
class QuickCheckResult:
    """Pass/fail answer from the minimal-cost quick check."""

    media_file: MediaFile
    results: tuple[ProbeResult, ...]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def issue_count(self) -> int:
        """0 when healthy, 1 otherwise, however many problems were found."""
        return 0 if self.passed else 1


def default_repair_output(input_path: Path) -> Path:
    """Default repaired file path: ``<stem>_repaired<suffix>`` beside input."""
    return input_path.with_name(f"{input_path.stem}_repaired{input_path.suffix}")


@dataclass(frozen=True)
class RepairPlan:
    """What the repair executor should do."""

    input_path: Path
    output_path: Path | None = None
    backup_requested: bool = False
    force_mode: bool = False

    def __post_init__(self) -> None:
        if self.output_path is None:
            object.__setattr__(
                self, "output_path", default_repair_output(self.input_path)
            )
        if Path(self.output_path).resolve() == self.input_path.resolve():
            raise ValueError(
                f"Repair output must differ from input: {self.output_path}"
            )

    @property
    def strategy(self) -> RepairStrategy:
        if self.force_mode:
            return RepairStrategy.FORCED_REMUX
        return RepairStrategy.TOLERANT_REMUX


@dataclass(frozen=True)
class RepairOutcome:
    """Result of a repair attempt.

    ``execution_succeeded`` reflects the output file only (exists and is not
    implausibly small). ``verified`` is the integrity verdict on the output
    and may be False even when execution succeeded.
    """

    output_path: Path
    execution_succeeded: bool
    output_non_empty: bool
    verified: bool
    strategy: RepairStrategy = RepairStrategy.TOLERANT_REMUX
    backup_path: Path | None = None
    tool_returncode: int | None = None
    warnings: tuple[str, ...] = ()
    message: str = ""
    tool_output: str = ""
    """Remux tool diagnostics, shown in verbose output on failure."""
    verification: ProbeResult | None = field(default=None, compare=False)
