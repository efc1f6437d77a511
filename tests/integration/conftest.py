"""Integration test fixtures for the mkv-doctor command line.

External tools are never executed: the CLI is given a stub introspector
and tool availability checks report every tool as present.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mkvdoctor.executor.interface import REQUIRED_TOOLS


@pytest.fixture(autouse=True)
def reset_root_logger():
    """The CLI reconfigures the root logger; restore it after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)


@pytest.fixture
def runner(temp_dir: Path) -> CliRunner:
    """CliRunner isolated from any user config file."""
    return CliRunner(env={"MKVDOCTOR_CONFIG_PATH": str(temp_dir / "none.toml")})


@pytest.fixture
def cli_stub(stub):
    """Route the CLI's introspector to the stub and report all tools present."""
    with patch("mkvdoctor.cli.ExternalToolIntrospector", return_value=stub):
        with patch(
            "mkvdoctor.cli.check_tool_availability",
            return_value={name: True for name in REQUIRED_TOOLS},
        ):
            yield stub
