"""Typed access to MKVDOCTOR_* environment variables.

EnvReader takes an optional mapping in place of os.environ, so the loader
can be exercised in tests without touching the process environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class EnvReader:
    """Read environment variables with type conversion.

    Unset variables yield the default. Values that fail to convert are
    logged and also yield the default, so a typo in the environment never
    aborts a run.

        reader = EnvReader(env={"MKVDOCTOR_WORKERS": "4"})
        reader.get_int("MKVDOCTOR_WORKERS", 1)  # 4
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _convert(
        self, var: str, convert: Callable[[str], T], default: T | None
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning(
                "Invalid %s value for %s: %s", convert.__name__, var, raw
            )
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._convert(var, int, default)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._convert(var, float, default)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Parse a flag; "1", "true", "yes" and "on" (any case) are true."""
        raw = self._env.get(var)
        if raw is None:
            return default
        return raw.strip().casefold() in _TRUE_VALUES

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a path, expanding ``~``.

        With ``must_exist``, a path that is not on disk is logged and
        replaced by the default.
        """
        raw = self._env.get(var)
        if raw is None:
            return default
        path = Path(raw).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to a missing path: %s", var, raw)
            return default
        return path
