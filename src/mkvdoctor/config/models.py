"""Configuration data models.

This module defines dataclasses for MKV Doctor configuration options.
Every section validates itself in ``__post_init__`` and raises ValueError on
invalid values.
"""

from dataclasses import dataclass, field
from pathlib import Path

from mkvdoctor.domain.enums import AnalysisMode

_VALID_LOG_LEVELS = ("debug", "info", "warning", "error")
_VALID_LOG_FORMATS = ("text", "json")


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None
    mkvinfo: Path | None = None
    mkvmerge: Path | None = None

    def get(self, name: str) -> Path | None:
        """Configured path for a tool name, or None."""
        return getattr(self, name, None)


@dataclass
class ThresholdsConfig:
    """Limits used by the analysis probes."""

    sync_warning_seconds: float = 0.1
    sync_error_seconds: float = 1.0
    timestamp_gap_seconds: float = 10.0
    max_duration_hours: float = 4.0
    max_file_size_gb: float = 10.0
    max_tag_length: int = 100
    max_audio_channels: int = 8
    max_sample_rate: int = 96000
    lossless_channel_limit: int = 6
    max_video_level: float = 5.2
    """Video levels at or above this value are flagged."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.sync_warning_seconds < 0:
            raise ValueError("sync_warning_seconds must be >= 0")
        if self.sync_error_seconds < self.sync_warning_seconds:
            raise ValueError("sync_error_seconds must be >= sync_warning_seconds")
        if self.timestamp_gap_seconds <= 0:
            raise ValueError("timestamp_gap_seconds must be > 0")
        if self.max_tag_length < 1:
            raise ValueError("max_tag_length must be >= 1")


@dataclass
class StressConfig:
    """Seek positions used by the stress probe."""

    seek_offsets: tuple[float, ...] = (0, 10, 30, 60, 120, 300)
    seek_window_seconds: float = 5.0
    end_window_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.seek_offsets = tuple(float(o) for o in self.seek_offsets)
        if any(o < 0 for o in self.seek_offsets):
            raise ValueError("seek_offsets must be non-negative")
        if self.seek_window_seconds <= 0 or self.end_window_seconds <= 0:
            raise ValueError("seek windows must be > 0")


@dataclass
class TimeoutsConfig:
    """Timeouts in seconds for external tool calls. 0 disables a timeout."""

    metadata: int = 60
    """ffprobe format/stream queries and mkvinfo/mkvmerge."""

    packets: int = 600
    """ffprobe packet enumeration."""

    decode: int = 1800
    """Whole-file integrity decode."""

    seek: int = 120
    """Single seek-and-decode stress test."""

    remux: int = 1800
    """Repair remux."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("metadata", "packets", "decode", "seek", "remux"):
            if getattr(self, name) < 0:
                raise ValueError(f"timeouts.{name} must be >= 0")

    @staticmethod
    def effective(value: int) -> int | None:
        """Convert a configured timeout to a subprocess timeout."""
        return value if value > 0 else None


@dataclass
class RepairConfig:
    """Configuration for the repair executor."""

    min_output_bytes: int = 1024 * 1024
    """Repaired files smaller than this are treated as failed output."""

    muxing_queue_size: int = 1024
    """Muxing queue bound used by the forced remux strategy."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.min_output_bytes < 1:
            raise ValueError("min_output_bytes must be >= 1")
        if self.muxing_queue_size < 1:
            raise ValueError("muxing_queue_size must be >= 1")


@dataclass
class AnalysisConfig:
    """Configuration for probe execution."""

    workers: int = 1
    """Number of probes run concurrently (1 = sequential)."""

    packet_read_intervals: str | None = None
    """Optional ffprobe read interval limiting timing analysis (e.g. "%+600")."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.workers < 1:
            raise ValueError("workers must be >= 1")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "warning"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = True
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.casefold() not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"level must be one of {_VALID_LOG_LEVELS}, got {self.level}"
            )
        if self.format.casefold() not in _VALID_LOG_FORMATS:
            raise ValueError(
                f"format must be one of {_VALID_LOG_FORMATS}, got {self.format}"
            )
        if self.max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")
        if self.backup_count < 0:
            raise ValueError("backup_count must be >= 0")


@dataclass
class DoctorConfig:
    """Complete MKV Doctor configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    stress: StressConfig = field(default_factory=StressConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    repair: RepairConfig = field(default_factory=RepairConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class DoctorOptions:
    """Per-invocation run flags, threaded explicitly through the workflow."""

    mode: AnalysisMode = AnalysisMode.FULL
    verbose: bool = False
    repair: bool = False
    analyze_only: bool = False
    force: bool = False
    backup: bool = False
    output: Path | None = None
    json_output: bool = False

    @property
    def repair_enabled(self) -> bool:
        """Repair was requested, not suppressed, and not a quick check."""
        return (
            self.repair
            and not self.analyze_only
            and self.mode != AnalysisMode.QUICK
        )
