"""Configuration management for MKV Doctor.

This module provides configuration loading with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (MKVDOCTOR_*)
3. Config file (~/.mkvdoctor/config.toml)
4. Default values (lowest priority)
"""

from mkvdoctor.config.env import EnvReader
from mkvdoctor.config.loader import (
    ConfigError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from mkvdoctor.config.models import (
    AnalysisConfig,
    DoctorConfig,
    DoctorOptions,
    LoggingConfig,
    RepairConfig,
    StressConfig,
    ThresholdsConfig,
    TimeoutsConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "AnalysisConfig",
    "DoctorConfig",
    "DoctorOptions",
    "LoggingConfig",
    "RepairConfig",
    "StressConfig",
    "ThresholdsConfig",
    "TimeoutsConfig",
    "ToolPathsConfig",
    # Loader
    "ConfigError",
    "EnvReader",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
