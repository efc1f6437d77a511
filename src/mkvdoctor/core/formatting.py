"""Formatting utilities.

Pure functions for formatting values for display.
"""


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes.

    Returns:
        Formatted string (e.g., "4.2 GB", "128 MB", "1.5 KB").
    """
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GB"
    elif size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_duration(seconds: float | None) -> str:
    """Format a duration as H:MM:SS.

    Args:
        seconds: Duration in seconds, or None if unknown.

    Returns:
        Formatted string (e.g., "1:42:07") or "unknown".
    """
    if seconds is None or seconds < 0:
        return "unknown"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_offset(seconds: float) -> str:
    """Format a seek offset compactly ("300s", "5391.5s")."""
    if float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{seconds:.1f}s"
