"""Settings loading for the service and the CLI."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from cfs.config.models import ServiceSettings
from cfs.errors import SettingsError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`ServiceSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServiceSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing. Relative
        directories are made absolute against the current working directory.

        Raises:
            SettingsError: On read errors, YAML parse errors or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise SettingsError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SettingsError("Settings YAML must be a mapping")

        try:
            settings = ServiceSettings.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(str(exc)) from exc

        logger.debug("Loaded settings from %s", self._path)
        return settings


def load_settings(path: Path | None = None) -> ServiceSettings:
    """Return settings from *path*, or the built-in defaults when no file is given."""
    if path is None:
        return ServiceSettings()
    return SettingsLoader(path).load()
