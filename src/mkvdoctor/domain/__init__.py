"""Domain models and enums for MKV Doctor."""

from mkvdoctor.domain.enums import (
    AnalysisMode,
    CorruptionSignature,
    RepairStrategy,
    Severity,
    StreamType,
)
from mkvdoctor.domain.media import (
    ContainerElements,
    ContainerMeta,
    ContainerStructure,
    DecodeVerdict,
    FormatInfo,
    InvalidMediaFileError,
    MediaFile,
    PacketInfo,
    PacketQuery,
    StreamInfo,
    TrackSummary,
)
from mkvdoctor.domain.models import (
    AnalysisReport,
    Finding,
    ProbeResult,
    QuickCheckResult,
    RepairOutcome,
    RepairPlan,
    default_repair_output,
)

__all__ = [
    # Enums
    "AnalysisMode",
    "CorruptionSignature",
    "RepairStrategy",
    "Severity",
    "StreamType",
    # Media
    "ContainerElements",
    "ContainerMeta",
    "ContainerStructure",
    "DecodeVerdict",
    "FormatInfo",
    "InvalidMediaFileError",
    "MediaFile",
    "PacketInfo",
    "PacketQuery",
    "StreamInfo",
    "TrackSummary",
    # Analysis and repair
    "AnalysisReport",
    "Finding",
    "ProbeResult",
    "QuickCheckResult",
    "RepairOutcome",
    "RepairPlan",
    "default_repair_output",
]
