"""Analysis orchestration for MKV Doctor."""

from mkvdoctor.analysis.aggregator import build_report, count_issues
from mkvdoctor.analysis.controller import (
    DEEP_TIER_PROBES,
    FULL_PROBES,
    QUICK_PROBES,
    ModeController,
    probes_for_mode,
)

__all__ = [
    "DEEP_TIER_PROBES",
    "FULL_PROBES",
    "QUICK_PROBES",
    "ModeController",
    "build_report",
    "count_issues",
    "probes_for_mode",
]
