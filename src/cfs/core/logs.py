"""LogReader — return the tail of a log file from a restricted set of locations."""

from __future__ import annotations

import logging
import os
import sys
from collections import deque
from typing import TYPE_CHECKING

from cfs.core.paths import PathGuard
from cfs.errors import ConfigurationError, ExecutionError, InvalidInputError, NotFoundError
from cfs.utils.telemetry import ATTR_LOG_FILE, ATTR_LOG_LINES, get_tracer, operation_span

if TYPE_CHECKING:
    from pathlib import Path

    from cfs.config.models import LogConfig

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class LogReader:
    """Locate and tail log files.

    The default log file is looked up in the log base directory, then the
    working directory, then ``<working directory>/logs``. Any other file must
    live directly in the log base directory.
    """

    def __init__(self, config: LogConfig) -> None:
        self._config = config
        self._guard = PathGuard(config.base_dir)

    @property
    def config(self) -> LogConfig:
        return self._config

    def tail(self, file_param: str, line_count: int | None = None) -> str:
        """Return the last *line_count* lines of *file_param*.

        A missing or non-positive *line_count* falls back to the configured
        default. Lines are joined with ``os.linesep``, without a trailing one.

        Raises:
            InvalidInputError: *file_param* carries a path separator or escapes the base.
            NotFoundError: The file is absent, unreadable or a directory.
            ConfigurationError: The log base directory is missing (named files only).
            ExecutionError: The file could not be read or decoded.
        """
        if line_count is None or line_count <= 0:
            line_count = self._config.default_lines

        try:
            name = PathGuard.filename_only(file_param)
        except InvalidInputError:
            logger.warning("Rejected log file name %r", file_param)
            raise

        if name == self._config.default_file:
            path = self._find_default()
        else:
            path = self._resolve_named(name)

        if not path.is_file() or not os.access(path, os.R_OK):
            raise NotFoundError(f"Log file not found, not readable, or is a directory: {path}")

        attributes = {ATTR_LOG_FILE: str(path), ATTR_LOG_LINES: line_count}
        with operation_span(_tracer, "cfs.logs.tail", attributes):
            return _read_tail(path, line_count)

    def _find_default(self) -> Path:
        """Return the first existing default log location."""
        candidates = self._config.default_search_paths
        for candidate in candidates:
            if candidate.exists():
                return candidate
        attempted = ", ".join(str(c) for c in candidates)
        raise NotFoundError(
            f"Default log file '{self._config.default_file}' not found in standard locations: {attempted}"
        )

    def _resolve_named(self, name: str) -> Path:
        try:
            path = self._guard.resolve(name)
        except InvalidInputError:
            logger.warning("Rejected log file name %r", name)
            raise
        base_dir = self._config.base_dir
        if not base_dir.is_dir():
            logger.error("Log base directory '%s' does not exist or is not a directory.", base_dir)
            raise ConfigurationError(
                str(base_dir),
                f"Log base directory misconfiguration. Cannot access file: {name}",
            )
        return path


def _read_tail(path: Path, line_count: int) -> str:
    """Read *path* as UTF-8 and keep only the last *line_count* lines.

    Counts above ``sys.maxsize`` keep the whole file, like any count larger
    than the line total. Universal newline mode treats ``\\n``, ``\\r\\n``
    and ``\\r`` as line ends.
    """
    try:
        with path.open(encoding="utf-8") as handle:
            kept = deque(
                (line.removesuffix("\n") for line in handle),
                maxlen=min(line_count, sys.maxsize),
            )
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading log file '%s': %s", path, exc)
        raise ExecutionError(f"Error reading log file: {exc}") from exc
    return os.linesep.join(kept)
