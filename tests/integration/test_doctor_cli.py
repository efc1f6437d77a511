"""Integration tests for the mkv-doctor command."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from mkvdoctor.cli import main
from mkvdoctor.cli.exit_codes import ExitCode
from mkvdoctor.domain.media import ContainerMeta, ContainerStructure, DecodeVerdict
from mkvdoctor.executor.backup import LOCK_SUFFIX, LockUnavailableError, file_lock


def _fake_remux(args, timeout=None):
    Path(args[-1]).write_bytes(b"\0" * 2 * 1024 * 1024)
    return "", "", 0


class TestArgumentsAndErrors:
    """Tests for option handling and fatal exit codes."""

    def test_help(self, runner) -> None:
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "--check-only" in result.output
        assert "--analyze-only" in result.output

    def test_missing_file(self, runner, cli_stub, temp_dir: Path) -> None:
        result = runner.invoke(main, [str(temp_dir / "nonexistent.mkv")])

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "does not exist" in result.output

    def test_missing_file_json(self, runner, cli_stub, temp_dir: Path) -> None:
        missing = temp_dir / "nonexistent.mkv"
        result = runner.invoke(main, [str(missing), "--json"])

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert '"code": "TARGET_NOT_FOUND"' in result.output
        assert f'"file": "{missing}"' in result.output

    def test_directory_rejected(self, runner, cli_stub, temp_dir: Path) -> None:
        result = runner.invoke(main, [str(temp_dir)])
        assert result.exit_code == ExitCode.TARGET_NOT_REGULAR

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
    def test_unreadable_file(self, runner, cli_stub, media_path: Path) -> None:
        media_path.chmod(0)
        try:
            result = runner.invoke(main, [str(media_path)])
        finally:
            media_path.chmod(0o644)
        assert result.exit_code == ExitCode.TARGET_NOT_READABLE

    def test_missing_explicit_config(self, runner, cli_stub, media_path, temp_dir):
        result = runner.invoke(
            main, [str(media_path), "--config", str(temp_dir / "missing.toml")]
        )
        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_invalid_config_json_error(self, runner, cli_stub, media_path, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text("[analysis]\nworkers = 0\n")

        result = runner.invoke(
            main, [str(media_path), "--config", str(config_file), "--json"]
        )

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert '"code": "CONFIG_ERROR"' in result.output

    def test_output_equal_to_input(self, runner, cli_stub, media_path) -> None:
        result = runner.invoke(
            main, [str(media_path), "--repair", "--output", str(media_path)]
        )
        assert result.exit_code == ExitCode.USAGE_ERROR

    def test_workers_must_be_positive(self, runner, media_path) -> None:
        result = runner.invoke(main, [str(media_path), "--workers", "0"])
        assert result.exit_code == ExitCode.USAGE_ERROR


class TestAnalysis:
    """Tests for analysis runs and their exit status."""

    def test_healthy_file(self, runner, cli_stub, media_path) -> None:
        result = runner.invoke(main, [str(media_path)])

        assert result.exit_code == 0
        assert "No issues detected" in result.output
        assert "[PASS] structural" in result.output

    def test_exit_status_is_issue_count(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)
        cli_stub.structure = ContainerStructure()
        cli_stub.container = ContainerMeta()

        result = runner.invoke(main, [str(media_path)])

        assert result.exit_code == 3
        assert "3 issue(s) detected (3 of 8 probes failed)" in result.output

    def test_json_output(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        result = runner.invoke(main, [str(media_path), "--json"])

        data = json.loads(result.output)
        assert result.exit_code == data["total_issues"] == 1
        assert data["mode"] == "full"
        assert [r["probe"] for r in data["results"] if not r["passed"]] == [
            "integrity"
        ]

    def test_check_only(self, runner, cli_stub, media_path) -> None:
        cli_stub.structure = ContainerStructure()
        cli_stub.container = ContainerMeta()
        cli_stub.streams = []

        result = runner.invoke(main, [str(media_path), "--check-only"])

        assert result.exit_code == 1
        assert "Quick check failed" in result.output
        assert cli_stub.calls_to("verify_decode") == []

    def test_check_only_wins_over_deep(self, runner, cli_stub, media_path) -> None:
        result = runner.invoke(main, [str(media_path), "-c", "-d"])

        assert result.exit_code == 0
        assert "Quick check passed" in result.output
        assert cli_stub.calls_to("seek_and_decode") == []

    def test_deep_runs_stress(self, runner, cli_stub, media_path) -> None:
        cli_stub.failed_seeks = {60.0}

        result = runner.invoke(main, [str(media_path), "--deep"])

        assert result.exit_code == 1
        assert "Seek to 60s failed" in result.output

    def test_verbose_shows_diagnostics(self, runner, cli_stub, media_path) -> None:
        result = runner.invoke(main, [str(media_path), "--verbose"])
        assert "| Streams: 1 video, 1 audio" in result.output

    def test_parallel_workers_same_result(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        sequential = runner.invoke(main, [str(media_path), "--json"])
        parallel = runner.invoke(main, [str(media_path), "--json", "--workers", "4"])

        assert sequential.output == parallel.output


class TestRepair:
    """Tests for repair via the command line."""

    def test_healthy_file_not_repaired(self, runner, cli_stub, media_path) -> None:
        result = runner.invoke(main, [str(media_path), "--repair", "--force"])

        assert result.exit_code == 0
        assert "repair not necessary" in result.output
        assert not media_path.with_name("movie_repaired.mkv").exists()

    def test_analyze_only_suppresses_repair(
        self, runner, cli_stub, media_path
    ) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        result = runner.invoke(main, [str(media_path), "--repair", "--analyze-only"])

        assert result.exit_code == 1
        assert "analyze-only mode is enabled" in result.output
        assert not media_path.with_name("movie_repaired.mkv").exists()

    def test_repair_with_backup(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        with patch(
            "mkvdoctor.executor.remux.require_tool",
            return_value=Path("/usr/bin/ffmpeg"),
        ):
            with patch(
                "mkvdoctor.executor.remux.run_command", side_effect=_fake_remux
            ):
                result = runner.invoke(
                    main, [str(media_path), "--repair", "--backup", "--json"]
                )

        data = json.loads(result.output)
        assert result.exit_code == 1
        assert data["repair"]["decision"] == "performed"
        assert data["repair"]["execution_succeeded"] is True
        # The stub still reports decode failures for the repaired file
        assert data["repair"]["verified"] is False
        assert Path(data["repair"]["backup_path"]).exists()
        assert media_path.with_name("movie_repaired.mkv").exists()
        assert not media_path.with_name(media_path.name + LOCK_SUFFIX).exists()

    def test_locked_file(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        with file_lock(media_path):
            result = runner.invoke(main, [str(media_path), "--repair"])

        assert result.exit_code == ExitCode.FILE_LOCKED
        assert "another process" in result.output

    def test_check_only_repair_skips_lock(self, runner, cli_stub, media_path) -> None:
        with file_lock(media_path):
            result = runner.invoke(
                main, [str(media_path), "--check-only", "--repair"]
            )

        assert result.exit_code == 0
        assert "Quick check passed" in result.output

    def test_lock_unavailable(self, runner, cli_stub, media_path) -> None:
        cli_stub.decode = DecodeVerdict(ok=False)

        with patch(
            "mkvdoctor.cli.file_lock",
            side_effect=LockUnavailableError("Cannot create lock file"),
        ):
            result = runner.invoke(main, [str(media_path), "--repair", "--json"])

        assert result.exit_code == ExitCode.LOCK_UNAVAILABLE
        assert '"code": "LOCK_UNAVAILABLE"' in result.output
