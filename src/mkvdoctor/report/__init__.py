"""Report rendering for MKV Doctor."""

from mkvdoctor.report.formatters import (
    format_outcome_human,
    format_outcome_json,
    format_probe_result,
    format_quick_human,
    format_repair_human,
    format_report_human,
    format_report_json,
    report_to_dict,
    result_to_dict,
)

__all__ = [
    "format_outcome_human",
    "format_outcome_json",
    "format_probe_result",
    "format_quick_human",
    "format_repair_human",
    "format_report_human",
    "format_report_json",
    "report_to_dict",
    "result_to_dict",
]
