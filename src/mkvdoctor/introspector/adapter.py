"""External-tool implementation of the MediaIntrospector protocol.

Uses ffprobe for format, stream and packet metadata, ffmpeg for decode
verification and seek tests, and mkvinfo/mkvmerge for Matroska container
metadata.
"""

from __future__ import annotations

import json
import logging
import subprocess  # nosec B404 - only for TimeoutExpired
import threading
from pathlib import Path

from mkvdoctor.config.models import ToolPathsConfig
from mkvdoctor.core.subprocess_utils import run_command, tool_name
from mkvdoctor.domain.media import (
    ContainerMeta,
    ContainerStructure,
    DecodeVerdict,
    FormatInfo,
    MediaFile,
    PacketInfo,
    PacketQuery,
    StreamInfo,
)
from mkvdoctor.executor.interface import ToolNotAvailableError, require_tool
from mkvdoctor.introspector.interface import MediaIntrospectionError
from mkvdoctor.introspector.parsers import (
    classify_decode_diagnostics,
    parse_format,
    parse_mkvinfo_structure,
    parse_mkvmerge_identification,
    parse_packets,
    parse_streams,
)

logger = logging.getLogger(__name__)

# Lines of mkvinfo output kept for verbose rendering
MAX_STRUCTURE_LINES = 50


class ExternalToolIntrospector:
    """MediaIntrospector backed by ffprobe, ffmpeg, mkvinfo and mkvmerge.

    Format/stream probing, mkvinfo structure and mkvmerge identification are
    each memoized per file state (path, size, mtime), so several probes share
    one tool invocation and a missing tool only affects the probes using it.
    The caches are guarded by a lock because probes may run on a thread pool.
    """

    def __init__(self, tools: ToolPathsConfig | None = None) -> None:
        """Initialize the introspector.

        Args:
            tools: Configured tool paths. Unset tools are looked up in PATH
                lazily, on first use.
        """
        self._tools = tools or ToolPathsConfig()
        self._tool_paths: dict[str, Path] = {}
        self._probe_cache: dict[tuple, dict] = {}
        self._structure_cache: dict[tuple, ContainerStructure] = {}
        self._container_cache: dict[tuple, ContainerMeta] = {}
        self._lock = threading.Lock()

    def _tool(self, name: str) -> Path:
        """Resolve and remember a tool path.

        Raises:
            MediaIntrospectionError: If the tool is not installed.
        """
        if name not in self._tool_paths:
            try:
                self._tool_paths[name] = require_tool(name, self._tools)
            except ToolNotAvailableError as e:
                raise MediaIntrospectionError(
                    f"{name} is not installed or not in PATH"
                ) from e
        return self._tool_paths[name]

    def _run(
        self, args: list[str | Path], timeout: float | None
    ) -> tuple[str, str, int]:
        """Run a tool, converting invocation failures to MediaIntrospectionError."""
        name = tool_name(args)
        try:
            return run_command(args, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"{name} timed out after {e.timeout}s"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"{name} could not be run: {e}") from e

    def _run_json(self, args: list[str | Path], timeout: float | None) -> dict:
        """Run a tool that prints JSON on stdout and parse it."""
        name = tool_name(args)
        stdout, stderr, returncode = self._run(args, timeout)
        if not stdout.strip():
            raise MediaIntrospectionError(
                f"{name} produced no output (exit {returncode}): "
                f"{stderr.strip() or 'no diagnostics'}"
            )
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise MediaIntrospectionError(
                f"Invalid {name} output: {e}"
            ) from e
        if not isinstance(data, dict):
            raise MediaIntrospectionError(f"Unexpected {name} output")
        return data

    def _probe(self, media: MediaFile, timeout: float | None) -> dict:
        """ffprobe format and streams, memoized per file state."""
        key = media.cache_key
        with self._lock:
            cached = self._probe_cache.get(key)
        if cached is not None:
            return cached

        data = self._run_json(
            [
                self._tool("ffprobe"),
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                "-show_format",
                media.path,
            ],
            timeout,
        )
        if "streams" not in data or "format" not in data:
            raise MediaIntrospectionError(
                f"Missing 'streams' or 'format' in ffprobe output for {media.path}. "
                "File may be corrupted or not a valid media file."
            )

        with self._lock:
            self._probe_cache[key] = data
        return data

    def get_format_info(
        self, media: MediaFile, timeout: float | None = None
    ) -> FormatInfo:
        return parse_format(self._probe(media, timeout))

    def get_streams(
        self, media: MediaFile, timeout: float | None = None
    ) -> list[StreamInfo]:
        return parse_streams(self._probe(media, timeout))

    def get_packets(
        self,
        media: MediaFile,
        query: PacketQuery | None = None,
        timeout: float | None = None,
    ) -> list[PacketInfo]:
        query = query or PacketQuery()
        args: list[str | Path] = [
            self._tool("ffprobe"),
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_entries",
            "packet=pts_time,stream_index",
        ]
        if query.stream_selector:
            args += ["-select_streams", query.stream_selector]
        if query.read_intervals:
            args += ["-read_intervals", query.read_intervals]
        args.append(media.path)

        return parse_packets(self._run_json(args, timeout))

    def verify_decode(
        self, media: MediaFile, timeout: float | None = None
    ) -> DecodeVerdict:
        _, stderr, returncode = self._run(
            [
                self._tool("ffmpeg"),
                "-hide_banner",
                "-v",
                "error",
                "-i",
                media.path,
                "-f",
                "null",
                "-",
            ],
            timeout,
        )
        signatures = classify_decode_diagnostics(stderr)
        ok = returncode == 0 and not signatures
        if not ok:
            logger.info(
                "Decode verification failed for %s (exit %d, %d signature(s))",
                media.path,
                returncode,
                len(signatures),
            )
        return DecodeVerdict(
            ok=ok, diagnostic_text=stderr.strip(), signatures=signatures
        )

    def get_container_structure(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerStructure:
        key = media.cache_key
        with self._lock:
            cached = self._structure_cache.get(key)
        if cached is not None:
            return cached

        # mkvinfo exits non-zero for non-Matroska input; that is reported as
        # missing elements rather than an invocation failure.
        stdout, stderr, returncode = self._run(
            [self._tool("mkvinfo"), media.path], timeout
        )
        lines = stdout.splitlines()[:MAX_STRUCTURE_LINES]
        if returncode != 0 and stderr.strip():
            lines.append(stderr.strip())
        structure = ContainerStructure(
            elements=parse_mkvinfo_structure(stdout), structure_lines=tuple(lines)
        )

        with self._lock:
            self._structure_cache[key] = structure
        return structure

    def get_container_meta(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerMeta:
        key = media.cache_key
        with self._lock:
            cached = self._container_cache.get(key)
        if cached is not None:
            return cached

        # mkvmerge -J exits 1 on warnings and 2 on errors but still prints JSON
        identification = self._run_json(
            [self._tool("mkvmerge"), "-J", media.path], timeout
        )
        tracks, warnings, errors = parse_mkvmerge_identification(identification)
        meta = ContainerMeta(tracks=tracks, warnings=warnings, errors=errors)

        with self._lock:
            self._container_cache[key] = meta
        return meta

    def seek_and_decode(
        self,
        media: MediaFile,
        position: float,
        duration: float,
        timeout: float | None = None,
    ) -> bool:
        _, stderr, returncode = self._run(
            [
                self._tool("ffmpeg"),
                "-hide_banner",
                "-v",
                "error",
                "-ss",
                f"{position:g}",
                "-i",
                media.path,
                "-t",
                f"{duration:g}",
                "-f",
                "null",
                "-",
            ],
            timeout,
        )
        if returncode != 0:
            logger.info(
                "Seek to %gs failed for %s: %s",
                position,
                media.path,
                stderr.strip()[:200],
            )
        return returncode == 0
