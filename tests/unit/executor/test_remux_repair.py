"""Unit tests for RemuxOptions and RepairExecutor.

FFmpeg is never executed: run_command is patched with a fake that writes
the output file the way a real remux would.
"""

import subprocess
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from mkvdoctor.config.models import DoctorConfig, RepairConfig
from mkvdoctor.domain.enums import RepairStrategy
from mkvdoctor.domain.media import DecodeVerdict
from mkvdoctor.domain.models import RepairPlan
from mkvdoctor.executor.backup import BackupError
from mkvdoctor.executor.interface import ToolNotAvailableError
from mkvdoctor.executor.remux import RemuxOptions, RepairExecutor

NOW = datetime(2024, 3, 9, 14, 5, 7)
OUTPUT_SIZE = 2 * 1024 * 1024


def _ffmpeg(name, tools=None):
    return Path("/usr/bin/ffmpeg")


def _fake_remux(size: int = OUTPUT_SIZE, returncode: int = 0, seen=None):
    """Build a run_command replacement writing ``size`` bytes to the output."""

    def fake(args, timeout=None):
        if seen is not None:
            seen.append(list(args))
        Path(args[-1]).write_bytes(b"\0" * size)
        return "", "Non-monotonous DTS in output stream", returncode

    return fake


@pytest.fixture
def executor(stub):
    return RepairExecutor(stub, DoctorConfig(), clock=lambda: NOW)


@pytest.fixture(autouse=True)
def ffmpeg_available():
    with patch("mkvdoctor.executor.remux.require_tool", side_effect=_ffmpeg):
        yield


class TestRemuxOptions:
    """Tests for FFmpeg argument construction."""

    def test_tolerant_command(self) -> None:
        options = RemuxOptions.for_strategy(RepairStrategy.TOLERANT_REMUX)
        cmd = options.build_command("ffmpeg", Path("in.mkv"), Path("out.mkv"))

        assert cmd == [
            "ffmpeg",
            "-hide_banner",
            "-y",
            "-fflags",
            "+genpts",
            "-err_detect",
            "ignore_err",
            "-i",
            "in.mkv",
            "-map",
            "0",
            "-c",
            "copy",
            "-avoid_negative_ts",
            "make_zero",
            "out.mkv",
        ]

    def test_forced_adds_muxing_queue(self) -> None:
        options = RemuxOptions.for_strategy(RepairStrategy.FORCED_REMUX, 2048)
        args = options.output_args()

        assert args[-2:] == ["-max_muxing_queue_size", "2048"]


class TestRepairExecutor:
    """Tests for RepairExecutor.repair."""

    def test_successful_repair(self, executor, media_path: Path) -> None:
        seen: list[list[str]] = []
        plan = RepairPlan(input_path=media_path)
        with patch(
            "mkvdoctor.executor.remux.run_command",
            side_effect=_fake_remux(seen=seen),
        ):
            outcome = executor.repair(plan)

        assert outcome.execution_succeeded
        assert outcome.verified
        assert outcome.output_path == media_path.with_name("movie_repaired.mkv")
        assert outcome.backup_path is None
        assert outcome.warnings == ()
        assert seen[0][seen[0].index("-i") + 1] == str(media_path)

    def test_backup_created_before_remux(self, executor, media_path: Path) -> None:
        backup = media_path.with_name("movie.mkv.backup.20240309_140507")

        def fake(args, timeout=None):
            assert backup.exists()
            return _fake_remux()(args, timeout)

        plan = RepairPlan(input_path=media_path, backup_requested=True)
        with patch("mkvdoctor.executor.remux.run_command", side_effect=fake):
            outcome = executor.repair(plan)

        assert outcome.backup_path == backup
        assert outcome.execution_succeeded

    def test_backup_failure_skips_remux(self, executor, media_path: Path) -> None:
        plan = RepairPlan(input_path=media_path, backup_requested=True)
        with patch(
            "mkvdoctor.executor.remux.create_timestamped_backup",
            side_effect=BackupError("disk full"),
        ):
            with patch("mkvdoctor.executor.remux.run_command") as mock_run:
                outcome = executor.repair(plan)

        mock_run.assert_not_called()
        assert not outcome.execution_succeeded
        assert "disk full" in outcome.message
        assert not plan.output_path.exists()

    def test_nonzero_exit_with_output_is_soft_success(
        self, executor, media_path: Path
    ) -> None:
        with patch(
            "mkvdoctor.executor.remux.run_command",
            side_effect=_fake_remux(returncode=1),
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert outcome.execution_succeeded
        assert outcome.tool_returncode == 1
        assert any("status 1" in w for w in outcome.warnings)

    def test_undersized_output_fails(self, executor, media_path: Path) -> None:
        with patch(
            "mkvdoctor.executor.remux.run_command",
            side_effect=_fake_remux(size=100, returncode=1),
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert not outcome.execution_succeeded
        assert outcome.output_non_empty
        assert "too small" in outcome.message
        assert "Non-monotonous" in outcome.tool_output

    def test_missing_output_fails(self, executor, media_path: Path) -> None:
        with patch(
            "mkvdoctor.executor.remux.run_command", return_value=("", "", 1)
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert not outcome.execution_succeeded
        assert not outcome.output_non_empty
        assert outcome.message == "Repair produced no output file"

    def test_stale_output_not_mistaken_for_repair(
        self, executor, stub, media_path: Path
    ) -> None:
        stale = media_path.with_name("movie_repaired.mkv")
        stale.write_bytes(b"\0" * OUTPUT_SIZE)

        with patch(
            "mkvdoctor.executor.remux.run_command",
            return_value=("", "Invalid data found when processing input", 1),
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert not outcome.execution_succeeded
        assert not outcome.verified
        assert outcome.message == "Repair produced no output file"
        assert not stale.exists()
        assert stub.calls_to("verify_decode") == []

    def test_previous_output_replaced(self, executor, media_path: Path) -> None:
        previous = media_path.with_name("movie_repaired.mkv")
        previous.write_bytes(b"old")

        def fake(args, timeout=None):
            assert not Path(args[-1]).exists()
            return _fake_remux()(args, timeout)

        with patch("mkvdoctor.executor.remux.run_command", side_effect=fake):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert outcome.execution_succeeded
        assert previous.stat().st_size == OUTPUT_SIZE

    def test_custom_minimum_output_size(self, stub, media_path: Path) -> None:
        config = DoctorConfig(repair=RepairConfig(min_output_bytes=10))
        executor = RepairExecutor(stub, config, clock=lambda: NOW)
        with patch(
            "mkvdoctor.executor.remux.run_command",
            side_effect=_fake_remux(size=100),
        ):
            assert executor.repair(RepairPlan(input_path=media_path)).execution_succeeded

    def test_timeout_removes_partial_output(self, executor, media_path: Path) -> None:
        plan = RepairPlan(input_path=media_path)

        def fake(args, timeout=None):
            Path(args[-1]).write_bytes(b"partial")
            raise subprocess.TimeoutExpired(args, timeout)

        with patch("mkvdoctor.executor.remux.run_command", side_effect=fake):
            outcome = executor.repair(plan)

        assert not outcome.execution_succeeded
        assert "timed out" in outcome.message
        assert not plan.output_path.exists()

    def test_verification_failure_keeps_execution_success(
        self, executor, stub, media_path: Path
    ) -> None:
        stub.decode = DecodeVerdict(ok=False)
        with patch(
            "mkvdoctor.executor.remux.run_command", side_effect=_fake_remux()
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert outcome.execution_succeeded
        assert not outcome.verified
        assert outcome.verification is not None
        assert "verification failed" in outcome.warnings[-1]

    def test_verification_checks_output_file(
        self, executor, stub, media_path: Path
    ) -> None:
        with patch(
            "mkvdoctor.executor.remux.run_command", side_effect=_fake_remux()
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert stub.calls_to("verify_decode") == [(outcome.output_path,)]

    def test_forced_strategy(self, executor, media_path: Path) -> None:
        seen: list[list[str]] = []
        plan = RepairPlan(input_path=media_path, force_mode=True)
        with patch(
            "mkvdoctor.executor.remux.run_command",
            side_effect=_fake_remux(seen=seen),
        ):
            outcome = executor.repair(plan)

        assert outcome.strategy == RepairStrategy.FORCED_REMUX
        assert seen[0][seen[0].index("-max_muxing_queue_size") + 1] == "1024"

    def test_missing_ffmpeg(self, executor, media_path: Path) -> None:
        with patch(
            "mkvdoctor.executor.remux.require_tool",
            side_effect=ToolNotAvailableError("ffmpeg"),
        ):
            outcome = executor.repair(RepairPlan(input_path=media_path))

        assert not outcome.execution_succeeded
        assert "ffmpeg" in outcome.message

    def test_input_never_modified(self, executor, media_path: Path) -> None:
        before = media_path.read_bytes()
        with patch(
            "mkvdoctor.executor.remux.run_command", side_effect=_fake_remux()
        ):
            executor.repair(RepairPlan(input_path=media_path))

        assert media_path.read_bytes() == before


class TestRepairPlan:
    """Tests for RepairPlan defaults."""

    def test_output_equal_to_input_rejected(self, media_path: Path) -> None:
        with pytest.raises(ValueError, match="differ"):
            RepairPlan(input_path=media_path, output_path=media_path)
