"""CLI module for MKV Doctor."""

import logging
import sys
from pathlib import Path

import click

from mkvdoctor.cli.exit_codes import MEDIA_ERROR_EXIT_CODES, ExitCode
from mkvdoctor.cli.output import error_exit
from mkvdoctor.config import ConfigError, DoctorConfig, DoctorOptions, get_config
from mkvdoctor.core.formatting import format_file_size
from mkvdoctor.domain.enums import AnalysisMode
from mkvdoctor.domain.media import InvalidMediaFileError, MediaFile
from mkvdoctor.executor.backup import FileLockError, LockUnavailableError, file_lock
from mkvdoctor.executor.interface import check_tool_availability
from mkvdoctor.introspector import ExternalToolIntrospector
from mkvdoctor.logging import configure_logging
from mkvdoctor.report import format_outcome_human, format_outcome_json
from mkvdoctor.workflow import DoctorWorkflow, WorkflowOutcome

logger = logging.getLogger(__name__)

# Files smaller than this are probably truncated
SMALL_FILE_BYTES = 1024 * 1024


def _warn_about_input(media: MediaFile) -> None:
    """Log non-fatal concerns about the input before analysis starts."""
    if media.path.suffix.casefold() != ".mkv":
        logger.warning(
            "File does not have .mkv extension: %s", media.path.name
        )
    if media.size_bytes < SMALL_FILE_BYTES:
        logger.warning(
            "File is very small (%s) - may be corrupted or incomplete",
            format_file_size(media.size_bytes),
        )


def _warn_about_tools(config: DoctorConfig) -> None:
    missing = [
        name
        for name, available in check_tool_availability(config.tools).items()
        if not available
    ]
    if missing:
        logger.warning(
            "Missing tools: %s - affected checks will report warnings",
            ", ".join(missing),
        )


def _select_mode(check_only: bool, deep: bool) -> AnalysisMode:
    if check_only:
        return AnalysisMode.QUICK
    if deep:
        return AnalysisMode.DEEP
    return AnalysisMode.FULL


def _run_workflow(
    workflow: DoctorWorkflow, media: MediaFile, options: DoctorOptions
) -> WorkflowOutcome:
    """Run the workflow, holding the repair lock when repair may write."""
    if not options.repair_enabled:
        return workflow.run(media)
    try:
        with file_lock(media.path):
            return workflow.run(media)
    except FileLockError as e:
        error_exit(
            str(e), ExitCode.FILE_LOCKED, options.json_output, file=media.path
        )
    except LockUnavailableError as e:
        error_exit(
            str(e), ExitCode.LOCK_UNAVAILABLE, options.json_output, file=media.path
        )


class DoctorCommand(click.Command):
    """Command whose usage errors exit with ExitCode.USAGE_ERROR.

    Click's default usage exit status (2) overlaps the issue-count range.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.USAGE_ERROR
            raise


@click.command(
    cls=DoctorCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(package_name="mkv-doctor")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--check-only",
    "-c",
    is_flag=True,
    help="Quick structural check only; exit status 0 (pass) or 1 (fail).",
)
@click.option(
    "--deep",
    "-d",
    is_flag=True,
    help="Deep analysis: full analysis plus seek stress testing.",
)
@click.option(
    "--analyze-only",
    "-a",
    is_flag=True,
    help="Only analyze; never repair, even with --repair.",
)
@click.option(
    "--repair",
    "-r",
    is_flag=True,
    help="Repair the file if issues are detected.",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Use the forced remux strategy when repairing.",
)
@click.option(
    "--backup",
    "-b",
    is_flag=True,
    help="Back up the original file before repair.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Repaired file path (default: <name>_repaired.<ext>).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show per-probe diagnostic detail.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of probes to run concurrently (default: 1).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file path (default: ~/.mkvdoctor/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
def main(
    file: Path,
    check_only: bool,
    deep: bool,
    analyze_only: bool,
    repair: bool,
    force: bool,
    backup: bool,
    output: Path | None,
    verbose: bool,
    json_output: bool,
    workers: int | None,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """MKV Doctor - diagnose and repair Matroska files.

    Runs a series of analysis probes against FILE and reports what they
    find. The exit status is the number of probes that reported issues
    (0 = healthy); fatal errors use codes 10 and above.

    \b
    Examples:
      mkv-doctor movie.mkv                    # Full analysis
      mkv-doctor movie.mkv --check-only       # Quick check
      mkv-doctor movie.mkv --deep             # Analysis with stress test
      mkv-doctor movie.mkv --repair --backup  # Repair with backup
    """
    try:
        config = get_config(
            config_path,
            workers=workers,
            log_level=log_level,
            log_file=log_file,
            log_format="json" if log_json else None,
        )
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)

    configure_logging(config.logging)

    try:
        media = MediaFile.load(file)
    except InvalidMediaFileError as e:
        error_exit(
            str(e),
            MEDIA_ERROR_EXIT_CODES.get(e.reason, ExitCode.TARGET_NOT_FOUND),
            json_output,
            file=file,
        )

    _warn_about_input(media)
    _warn_about_tools(config)

    options = DoctorOptions(
        mode=_select_mode(check_only, deep),
        verbose=verbose,
        repair=repair,
        analyze_only=analyze_only,
        force=force,
        backup=backup,
        output=output,
        json_output=json_output,
    )

    if output is not None and output.resolve() == media.path.resolve():
        error_exit(
            "Repair output must differ from the input file",
            ExitCode.USAGE_ERROR,
            json_output,
            file=media.path,
        )

    workflow = DoctorWorkflow(ExternalToolIntrospector(config.tools), config, options)
    outcome = _run_workflow(workflow, media, options)

    if json_output:
        click.echo(format_outcome_json(outcome))
    else:
        click.echo(format_outcome_human(outcome, verbose=verbose))

    sys.exit(outcome.issue_count)
