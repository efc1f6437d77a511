"""External tool availability utilities.

Tool paths are resolved from an explicit ToolPathsConfig (config file or
environment) with a system PATH fallback. Nothing here caches global state:
callers pass the configuration they were given.
"""

import shutil
from pathlib import Path

from mkvdoctor.config.models import ToolPathsConfig

REQUIRED_TOOLS: tuple[str, ...] = ("ffprobe", "ffmpeg", "mkvinfo", "mkvmerge")


class ToolNotAvailableError(RuntimeError):
    """Raised when a required external tool cannot be found."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Required tool not available: {tool}")
        self.tool = tool


def get_tool_path(name: str, tools: ToolPathsConfig | None = None) -> Path | None:
    """Resolve the path of an external tool.

    Args:
        name: Tool name (e.g., "ffprobe").
        tools: Configured tool paths. A configured path wins over PATH.

    Returns:
        Path to the executable, or None if not found.
    """
    configured = tools.get(name) if tools is not None else None
    if configured is not None:
        if configured.exists():
            return configured
        return None

    found = shutil.which(name)
    return Path(found) if found else None


def require_tool(name: str, tools: ToolPathsConfig | None = None) -> Path:
    """Resolve a tool path, raising if it is unavailable.

    Raises:
        ToolNotAvailableError: If the tool cannot be found.
    """
    path = get_tool_path(name, tools)
    if path is None:
        raise ToolNotAvailableError(name)
    return path


def check_tool_availability(tools: ToolPathsConfig | None = None) -> dict[str, bool]:
    """Check which of the tools used by the doctor are available.

    Returns:
        Mapping of tool name to availability, in REQUIRED_TOOLS order.
    """
    return {name: get_tool_path(name, tools) is not None for name in REQUIRED_TOOLS}
