"""Formatters for doctor results.

Functions to render analysis reports, quick-check results and repair
outcomes as human-readable text or JSON. JSON output contains no
generated timestamps, so two runs over an unchanged file serialize
identically.
"""

import json
from typing import Any

from mkvdoctor.core.formatting import format_file_size
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.domain.models import (
    AnalysisReport,
    Finding,
    ProbeResult,
    QuickCheckResult,
    RepairOutcome,
)
from mkvdoctor.workflow import RepairDecision, WorkflowOutcome

HEALTHY_MESSAGE = "No issues detected - file appears to be healthy"


def format_media_header(media: MediaFile) -> list[str]:
    return [
        f"File: {media.path}",
        f"Size: {format_file_size(media.size_bytes)}",
        f"Modified: {media.modified_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
    ]


def format_finding_line(finding: Finding) -> str:
    """Format a single finding, e.g. ``WARNING: A/V sync offset: 0.500s``."""
    return f"{finding.severity.label.upper()}: {finding.message}"


def format_probe_result(result: ProbeResult, verbose: bool = False) -> list[str]:
    """Format one probe result as indented lines.

    Args:
        result: Probe result to format.
        verbose: Include diagnostic lines and Info findings on passing probes.

    Returns:
        Lines for terminal output.
    """
    status = "PASS" if result.passed else "FAIL"
    lines = [f"[{status}] {result.probe}"]
    for finding in result.findings:
        lines.append(f"  - {format_finding_line(finding)}")
    if verbose:
        for line in result.diagnostics:
            lines.append(f"    | {line}")
    return lines


def format_report_human(report: AnalysisReport, verbose: bool = False) -> str:
    """Format an analysis report for human-readable output."""
    lines = format_media_header(report.media_file)
    lines.append(f"Mode: {report.mode.value}")
    lines.append("")

    for result in report.results:
        lines.extend(format_probe_result(result, verbose))

    lines.append("")
    lines.append("Summary:")
    if report.passed:
        lines.append(f"  {HEALTHY_MESSAGE}")
    else:
        lines.append(
            f"  {report.total_issues} issue(s) detected "
            f"({report.total_issues} of {report.probes_run} probes failed)"
        )
        lines.append(f"  Failed: {', '.join(report.failed_probes())}")
    return "\n".join(lines)


def format_quick_human(result: QuickCheckResult, verbose: bool = False) -> str:
    """Format a quick-check result for human-readable output."""
    lines = format_media_header(result.media_file)
    lines.append("Mode: quick")
    lines.append("")
    for probe_result in result.results:
        lines.extend(format_probe_result(probe_result, verbose))
    lines.append("")
    if result.passed:
        lines.append("Quick check passed")
    else:
        lines.append("Quick check failed - run a full analysis for details")
    return "\n".join(lines)


def format_repair_human(
    decision: RepairDecision,
    outcome: RepairOutcome | None,
    verbose: bool = False,
) -> str:
    """Format the repair step, or why it did not run."""
    if decision == RepairDecision.NOT_NECESSARY:
        return "Repair: no issues detected - repair not necessary"
    if decision == RepairDecision.SUPPRESSED:
        return "Repair: requested but analyze-only mode is enabled"
    if outcome is None:
        return ""

    lines = ["Repair:"]
    lines.append(f"  Strategy: {outcome.strategy.value}")
    if outcome.backup_path is not None:
        lines.append(f"  Backup: {outcome.backup_path}")
    lines.append(f"  Output: {outcome.output_path}")
    if outcome.execution_succeeded:
        lines.append("  Repair completed successfully")
        if outcome.verified:
            lines.append("  Repaired file verification passed")
        else:
            lines.append("  Repaired file verification failed - some issues may remain")
    else:
        lines.append(f"  Repair failed: {outcome.message}")
        if verbose and outcome.tool_output:
            lines.append("  Error output:")
            lines.extend(f"    {line}" for line in outcome.tool_output.splitlines())
    for warning in outcome.warnings:
        lines.append(f"  Warning: {warning}")
    return "\n".join(lines)


def format_outcome_human(outcome: WorkflowOutcome, verbose: bool = False) -> str:
    """Format a complete workflow outcome for human-readable output."""
    if outcome.quick_result is not None:
        return format_quick_human(outcome.quick_result, verbose)

    parts = []
    if outcome.report is not None:
        parts.append(format_report_human(outcome.report, verbose))
    repair_text = format_repair_human(outcome.repair_decision, outcome.repair, verbose)
    if repair_text:
        parts.append(repair_text)
    return "\n\n".join(parts)


def media_to_dict(media: MediaFile) -> dict[str, Any]:
    return {
        "path": str(media.path),
        "size_bytes": media.size_bytes,
        "modified_at": media.modified_at.isoformat(),
    }


def finding_to_dict(finding: Finding) -> dict[str, Any]:
    d: dict[str, Any] = {
        "severity": finding.severity.label,
        "message": finding.message,
    }
    if finding.detail is not None:
        d["detail"] = finding.detail
    return d


def result_to_dict(result: ProbeResult) -> dict[str, Any]:
    """Convert ProbeResult to JSON-serializable dict."""
    return {
        "probe": result.probe,
        "passed": result.passed,
        "findings": [finding_to_dict(f) for f in result.findings],
        "diagnostics": list(result.diagnostics),
    }


def report_to_dict(report: AnalysisReport) -> dict[str, Any]:
    """Convert AnalysisReport to JSON-serializable dict."""
    return {
        "mode": report.mode.value,
        "file": media_to_dict(report.media_file),
        "total_issues": report.total_issues,
        "probes_run": report.probes_run,
        "results": [result_to_dict(r) for r in report.results],
    }


def quick_to_dict(result: QuickCheckResult) -> dict[str, Any]:
    return {
        "mode": "quick",
        "file": media_to_dict(result.media_file),
        "passed": result.passed,
        "issue_count": result.issue_count,
        "results": [result_to_dict(r) for r in result.results],
    }


def repair_to_dict(
    decision: RepairDecision, outcome: RepairOutcome | None
) -> dict[str, Any]:
    d: dict[str, Any] = {"decision": decision.value}
    if outcome is None:
        return d
    d.update(
        {
            "strategy": outcome.strategy.value,
            "output_path": str(outcome.output_path),
            "backup_path": str(outcome.backup_path) if outcome.backup_path else None,
            "execution_succeeded": outcome.execution_succeeded,
            "output_non_empty": outcome.output_non_empty,
            "verified": outcome.verified,
            "tool_returncode": outcome.tool_returncode,
            "message": outcome.message,
            "warnings": list(outcome.warnings),
        }
    )
    return d


def format_report_json(report: AnalysisReport) -> str:
    """Format an analysis report as JSON."""
    return json.dumps(report_to_dict(report), indent=2)


def format_outcome_json(outcome: WorkflowOutcome) -> str:
    """Format a complete workflow outcome as JSON."""
    if outcome.quick_result is not None:
        data = quick_to_dict(outcome.quick_result)
    elif outcome.report is not None:
        data = report_to_dict(outcome.report)
    else:
        data = {"file": media_to_dict(outcome.media_file)}
    if outcome.repair_decision != RepairDecision.NOT_REQUESTED:
        data["repair"] = repair_to_dict(outcome.repair_decision, outcome.repair)
    return json.dumps(data, indent=2)
