"""Domain enums for MKV Doctor.

This module contains enums shared by the probes, the analysis controller,
the repair executor and the report formatters.
"""

from enum import Enum, IntEnum


class Severity(IntEnum):
    """Severity of a single finding.

    Integer values give the natural ordering Error > Warning > Info, so
    severities can be compared directly (``severity >= Severity.WARNING``).
    """

    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def label(self) -> str:
        """Lowercase name used in rendered and serialized reports."""
        return self.name.lower()


class AnalysisMode(Enum):
    """Which set of probes a run executes."""

    QUICK = "quick"  # Structural + stream inventory, pass/fail only
    FULL = "full"  # Standard analysis
    DEEP = "deep"  # Full analysis plus stress testing


class CorruptionSignature(Enum):
    """Known corruption signatures found in decoder diagnostics.

    Values are human-readable descriptions used directly as finding messages.
    """

    INVALID_DATA = "Invalid data found in stream"
    DECODE_ERROR = "Decoding errors detected"
    INVALID_TIMESTAMP = "Invalid timestamps detected"
    OVERSIZED_PACKET = "Oversized packets detected"


class StreamType(Enum):
    """Elementary stream type as reported by the media probe tool."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    ATTACHMENT = "attachment"
    DATA = "data"
    OTHER = "other"


class RepairStrategy(Enum):
    """Remux strategy used by the repair executor."""

    TOLERANT_REMUX = "tolerant-remux"
    FORCED_REMUX = "forced-remux"
