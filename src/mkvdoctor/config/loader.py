"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (MKVDOCTOR_*)
3. Config file (~/.mkvdoctor/config.toml)
4. Default values

Environment variables:
- MKVDOCTOR_CONFIG_PATH: Path to config file (overrides default location)
- MKVDOCTOR_FFMPEG_PATH: Path to ffmpeg executable
- MKVDOCTOR_FFPROBE_PATH: Path to ffprobe executable
- MKVDOCTOR_MKVINFO_PATH: Path to mkvinfo executable
- MKVDOCTOR_MKVMERGE_PATH: Path to mkvmerge executable
- MKVDOCTOR_WORKERS: Number of probes run concurrently
- MKVDOCTOR_TIMESTAMP_GAP_SECONDS: Packet timestamp gap threshold
- MKVDOCTOR_DECODE_TIMEOUT: Whole-file decode timeout in seconds
- MKVDOCTOR_MIN_REPAIR_OUTPUT_BYTES: Minimum plausible repaired file size
- MKVDOCTOR_LOG_LEVEL: Log level (debug, info, warning, error)
- MKVDOCTOR_LOG_FILE: Log file path
- MKVDOCTOR_LOG_FORMAT: Log format (text, json)
- MKVDOCTOR_LOG_STDERR: Also log to stderr when a log file is set (true/false)
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any

from mkvdoctor.config.env import EnvReader
from mkvdoctor.config.models import (
    AnalysisConfig,
    DoctorConfig,
    LoggingConfig,
    RepairConfig,
    StressConfig,
    ThresholdsConfig,
    TimeoutsConfig,
    ToolPathsConfig,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".mkvdoctor"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

_TOOL_NAMES = ("ffmpeg", "ffprobe", "mkvinfo", "mkvmerge")


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by MKVDOCTOR_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    reader = env or EnvReader()
    env_path = reader.get_path("MKVDOCTOR_CONFIG_PATH", must_exist=False)
    if env_path is not None:
        return env_path
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, a missing or malformed file raises ConfigError
            instead of being logged and ignored.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigError: In strict mode, if the file is missing or malformed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        if strict:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def _build_section(cls: type, data: Any, section: str) -> Any:
    """Instantiate a config dataclass from a TOML table.

    Unknown keys are logged and ignored. Path-typed fields are converted.

    Raises:
        ConfigError: If the table is malformed or a value fails validation.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"[{section}] must be a table")

    fields = {f.name: f for f in dataclasses.fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in fields:
            logger.warning("Unknown config key [%s] %s ignored", section, key)
            continue
        if "Path" in str(fields[key].type) and isinstance(value, str):
            value = Path(value).expanduser()
        kwargs[key] = value

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [{section}] configuration: {e}") from e


def _with_overrides(instance: Any, section: str, **overrides: Any) -> Any:
    """Apply non-None overrides to a config section, re-running validation.

    Raises:
        ConfigError: If an override fails validation.
    """
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return instance
    try:
        return dataclasses.replace(instance, **changes)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [{section}] override: {e}") from e


def _with_env_overrides(
    instance: Any, reader: EnvReader, **variables: tuple[str, str]
) -> Any:
    """Apply environment overrides to a config section one at a time.

    Each keyword maps a field name to ``(variable, kind)`` where kind names
    the EnvReader getter ("str", "int", "float", "bool" or "path"). A value
    that fails validation is logged and the file or default value is kept.
    """
    for field_name, (var, kind) in variables.items():
        if kind == "path":
            value = reader.get_path(var, must_exist=False)
        else:
            value = getattr(reader, f"get_{kind}")(var)
        if value is None:
            continue
        try:
            instance = dataclasses.replace(instance, **{field_name: value})
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring %s=%s: %s", var, value, e)
    return instance


def get_config(
    config_path: Path | None = None,
    *,
    env: EnvReader | None = None,
    # CLI overrides (highest precedence)
    workers: int | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
) -> DoctorConfig:
    """Get configuration with full precedence handling.

    Invalid environment values are logged and ignored. An invalid config
    file or CLI override is an error.

    Args:
        config_path: Explicit config file. When given, it must exist and
            parse; otherwise the default location is used leniently.
        env: Environment reader (defaults to os.environ).
        workers: CLI override for concurrent probe workers.
        log_level: CLI override for log level.
        log_file: CLI override for log file path.
        log_format: CLI override for log format ("text" or "json").

    Returns:
        DoctorConfig with merged configuration.

    Raises:
        ConfigError: If the config file or a CLI override is invalid.
    """
    reader = env or EnvReader()
    explicit = config_path is not None
    path = config_path if explicit else get_default_config_path(reader)
    file_config = load_config_file(path, strict=explicit)

    tools = _build_section(ToolPathsConfig, file_config.get("tools"), "tools")
    for name in _TOOL_NAMES:
        env_path = reader.get_path(f"MKVDOCTOR_{name.upper()}_PATH")
        if env_path is not None:
            setattr(tools, name, env_path)

    thresholds = _with_env_overrides(
        _build_section(ThresholdsConfig, file_config.get("thresholds"), "thresholds"),
        reader,
        timestamp_gap_seconds=("MKVDOCTOR_TIMESTAMP_GAP_SECONDS", "float"),
    )
    stress = _build_section(StressConfig, file_config.get("stress"), "stress")

    timeouts = _with_env_overrides(
        _build_section(TimeoutsConfig, file_config.get("timeouts"), "timeouts"),
        reader,
        decode=("MKVDOCTOR_DECODE_TIMEOUT", "int"),
    )

    repair = _with_env_overrides(
        _build_section(RepairConfig, file_config.get("repair"), "repair"),
        reader,
        min_output_bytes=("MKVDOCTOR_MIN_REPAIR_OUTPUT_BYTES", "int"),
    )

    analysis = _with_env_overrides(
        _build_section(AnalysisConfig, file_config.get("analysis"), "analysis"),
        reader,
        workers=("MKVDOCTOR_WORKERS", "int"),
    )
    analysis = _with_overrides(analysis, "analysis", workers=workers)

    logging_config = _with_env_overrides(
        _build_section(LoggingConfig, file_config.get("logging"), "logging"),
        reader,
        level=("MKVDOCTOR_LOG_LEVEL", "str"),
        file=("MKVDOCTOR_LOG_FILE", "path"),
        format=("MKVDOCTOR_LOG_FORMAT", "str"),
        include_stderr=("MKVDOCTOR_LOG_STDERR", "bool"),
    )
    logging_config = _with_overrides(
        logging_config,
        "logging",
        level=log_level,
        file=log_file,
        format=log_format,
    )

    return DoctorConfig(
        tools=tools,
        thresholds=thresholds,
        stress=stress,
        timeouts=timeouts,
        repair=repair,
        analysis=analysis,
        logging=logging_config,
    )
