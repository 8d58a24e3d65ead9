"""Service configuration — immutable settings models and the YAML loader."""

from cfs.config.loader import SettingsLoader, load_settings
from cfs.config.models import (
    AuthSettings,
    DownloadConfig,
    LogConfig,
    SandboxConfig,
    ServerSettings,
    ServiceSettings,
    TelemetrySettings,
)

__all__ = [
    "AuthSettings",
    "DownloadConfig",
    "LogConfig",
    "SandboxConfig",
    "ServerSettings",
    "ServiceSettings",
    "SettingsLoader",
    "TelemetrySettings",
    "load_settings",
]
