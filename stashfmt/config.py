"""Environment-driven defaults for diff rendering limits."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import InvalidArgumentError
from .log import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_LINES = 2000
DEFAULT_MAX_FILES = 50

ENV_MAX_LINES = "STASHFMT_MAX_LINES"
ENV_MAX_FILES = "STASHFMT_MAX_FILES"


def _positive_int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%d: must be positive, using %d", name, value, default)
        return default
    return value


@dataclass(frozen=True)
class DiffLimits:
    """Line and file caps for streamed diffs."""

    max_lines: int = DEFAULT_MAX_LINES
    max_files: int = DEFAULT_MAX_FILES

    @classmethod
    def from_environment(cls) -> DiffLimits:
        """Read STASHFMT_MAX_LINES / STASHFMT_MAX_FILES, falling back to defaults."""
        return cls(
            max_lines=_positive_int_from_env(ENV_MAX_LINES, DEFAULT_MAX_LINES),
            max_files=_positive_int_from_env(ENV_MAX_FILES, DEFAULT_MAX_FILES),
        )

    def validate(self) -> DiffLimits:
        if self.max_lines <= 0:
            raise InvalidArgumentError("max_lines", self.max_lines)
        if self.max_files <= 0:
            raise InvalidArgumentError("max_files", self.max_files)
        return self
