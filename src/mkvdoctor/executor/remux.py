"""Error-tolerant FFmpeg remux repair.

Repair rewrites the container with stream copy while regenerating
timestamps and ignoring decoder errors, then re-verifies the output with
the integrity probe. The input file is never modified.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - only for TimeoutExpired
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from mkvdoctor.config.models import DoctorConfig, TimeoutsConfig
from mkvdoctor.core.formatting import format_file_size
from mkvdoctor.core.subprocess_utils import run_command
from mkvdoctor.domain.enums import RepairStrategy
from mkvdoctor.domain.media import InvalidMediaFileError, MediaFile
from mkvdoctor.domain.models import ProbeResult, RepairOutcome, RepairPlan
from mkvdoctor.executor.backup import BackupError, create_timestamped_backup
from mkvdoctor.executor.interface import ToolNotAvailableError, require_tool
from mkvdoctor.introspector.interface import MediaIntrospector
from mkvdoctor.probes.base import ProbeContext
from mkvdoctor.probes.integrity import IntegrityProbe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemuxOptions:
    """Structured FFmpeg remux options.

    Attributes:
        strategy: Which repair variant the options implement.
        regenerate_pts: Generate missing presentation timestamps.
        ignore_decode_errors: Keep going past corrupt packets.
        map_all_streams: Copy every input stream, not only the defaults.
        shift_negative_timestamps: Shift timestamps so the first is zero.
        max_muxing_queue_size: Muxer queue bound, None for FFmpeg's default.
    """

    strategy: RepairStrategy = RepairStrategy.TOLERANT_REMUX
    regenerate_pts: bool = True
    ignore_decode_errors: bool = True
    map_all_streams: bool = True
    shift_negative_timestamps: bool = True
    max_muxing_queue_size: int | None = None

    @classmethod
    def for_strategy(
        cls, strategy: RepairStrategy, muxing_queue_size: int = 1024
    ) -> RemuxOptions:
        if strategy == RepairStrategy.FORCED_REMUX:
            return cls(strategy=strategy, max_muxing_queue_size=muxing_queue_size)
        return cls(strategy=strategy)

    def input_args(self) -> list[str]:
        """Options placed before ``-i``."""
        args = ["-hide_banner", "-y"]
        if self.regenerate_pts:
            args += ["-fflags", "+genpts"]
        if self.ignore_decode_errors:
            args += ["-err_detect", "ignore_err"]
        return args

    def output_args(self) -> list[str]:
        """Options placed between the input and the output path."""
        args: list[str] = []
        if self.map_all_streams:
            args += ["-map", "0"]
        args += ["-c", "copy"]
        if self.shift_negative_timestamps:
            args += ["-avoid_negative_ts", "make_zero"]
        if self.max_muxing_queue_size is not None:
            args += ["-max_muxing_queue_size", str(self.max_muxing_queue_size)]
        return args

    def build_command(
        self, ffmpeg: Path | str, input_path: Path, output_path: Path
    ) -> list[str]:
        """Full FFmpeg command line as an argument list."""
        return [
            str(ffmpeg),
            *self.input_args(),
            "-i",
            str(input_path),
            *self.output_args(),
            str(output_path),
        ]


class RepairExecutor:
    """Runs a repair plan and verifies the result.

    The executor does not decide whether repair is needed; callers check
    the analysis report first.
    """

    def __init__(
        self,
        introspector: MediaIntrospector,
        config: DoctorConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            introspector: Introspector used to verify the repaired output.
            config: Doctor configuration (tool paths, timeouts, thresholds).
            clock: Callable returning the current datetime, used for backup
                names. Defaults to ``datetime.now``.
        """
        self.introspector = introspector
        self.config = config or DoctorConfig()
        self._clock = clock or datetime.now

    def repair(self, plan: RepairPlan) -> RepairOutcome:
        """Execute a repair plan.

        Steps run in order: backup (if requested), remux, output check,
        verification. A failed backup stops before the remux runs, so no
        output is written.

        Args:
            plan: What to repair and where to write it.

        Returns:
            RepairOutcome describing every step taken.
        """
        output_path = plan.output_path
        assert output_path is not None  # filled by RepairPlan.__post_init__
        strategy = plan.strategy
        warnings: list[str] = []

        logger.info(
            "Repairing %s -> %s (%s)", plan.input_path, output_path, strategy.value
        )

        backup_path = None
        if plan.backup_requested:
            try:
                backup_path = create_timestamped_backup(
                    plan.input_path, now=self._clock()
                )
            except BackupError as e:
                logger.error("Backup failed, repair aborted: %s", e)
                return self._failed(plan, f"Backup failed: {e}")

        try:
            ffmpeg = require_tool("ffmpeg", self.config.tools)
        except ToolNotAvailableError as e:
            return self._failed(plan, str(e), backup_path=backup_path)

        options = RemuxOptions.for_strategy(
            strategy, self.config.repair.muxing_queue_size
        )
        cmd = options.build_command(ffmpeg, plan.input_path, output_path)
        timeout = TimeoutsConfig.effective(self.config.timeouts.remux)

        # The output check below must only ever see bytes written by this run
        if output_path.exists():
            logger.info("Removing previous repair output %s", output_path)
            try:
                output_path.unlink()
            except OSError as e:
                return self._failed(
                    plan,
                    f"Cannot replace existing output {output_path}: {e}",
                    backup_path=backup_path,
                )

        try:
            _, stderr, returncode = run_command(cmd, timeout=timeout)
        except subprocess.TimeoutExpired:
            output_path.unlink(missing_ok=True)
            return self._failed(
                plan,
                f"Remux timed out after {timeout}s; partial output removed",
                backup_path=backup_path,
            )
        except OSError as e:
            return self._failed(
                plan, f"Remux could not be started: {e}", backup_path=backup_path
            )

        output_size = output_path.stat().st_size if output_path.is_file() else 0
        min_size = self.config.repair.min_output_bytes
        if output_size < min_size:
            logger.error(
                "Repair produced no usable output (exit %d, %d bytes)",
                returncode,
                output_size,
            )
            if stderr.strip():
                logger.debug("ffmpeg stderr: %s", stderr.strip())
            reason = (
                "Repair produced no output file"
                if output_size == 0
                else f"Repaired file is too small ({format_file_size(output_size)})"
            )
            return RepairOutcome(
                output_path=output_path,
                execution_succeeded=False,
                output_non_empty=output_size > 0,
                verified=False,
                strategy=strategy,
                backup_path=backup_path,
                tool_returncode=returncode,
                message=reason,
                tool_output=stderr.strip(),
            )

        if returncode != 0:
            warning = (
                f"ffmpeg exited with status {returncode} but produced output; "
                "review the repaired file"
            )
            logger.warning(warning)
            warnings.append(warning)

        verification = self.verify(output_path)
        verified = verification is not None and verification.passed
        if not verified:
            warnings.append("Repaired file verification failed; some issues may remain")

        return RepairOutcome(
            output_path=output_path,
            execution_succeeded=True,
            output_non_empty=True,
            verified=verified,
            strategy=strategy,
            backup_path=backup_path,
            tool_returncode=returncode,
            warnings=tuple(warnings),
            message="Repair completed",
            verification=verification,
        )

    def verify(self, output_path: Path) -> ProbeResult | None:
        """Run the integrity probe on a repaired file.

        Returns:
            The probe result, or None if the output vanished before it
            could be checked.
        """
        try:
            media = MediaFile.load(output_path)
        except InvalidMediaFileError as e:
            logger.warning("Cannot verify repaired file: %s", e)
            return None
        context = ProbeContext(introspector=self.introspector, config=self.config)
        return IntegrityProbe().run(media, context)

    def _failed(
        self, plan: RepairPlan, message: str, backup_path: Path | None = None
    ) -> RepairOutcome:
        assert plan.output_path is not None
        return RepairOutcome(
            output_path=plan.output_path,
            execution_succeeded=False,
            output_non_empty=False,
            verified=False,
            strategy=plan.strategy,
            backup_path=backup_path,
            message=message,
        )
