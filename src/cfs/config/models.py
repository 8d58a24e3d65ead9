"""Pydantic models for the service settings file consumed by ``cfs serve``."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _absolute(value: str | Path) -> Path:
    """Make *value* absolute and lexically normalized (no symlink resolution)."""
    return Path(os.path.abspath(os.fspath(value)))


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)


class SandboxConfig(_Frozen):
    """Where and how shell commands run."""

    base_dir: Path = Field(default=Path("sandbox"), description="Working directory for every command.")
    timeout: float = Field(default=60.0, gt=0, description="Wall-clock limit per command, in seconds.")
    shell: str = Field(default="/bin/sh", description="Interpreter invoked as '<shell> -c <command>'.")

    @field_validator("base_dir")
    @classmethod
    def _absolute_base(cls, value: Path) -> Path:
        return _absolute(value)


class DownloadConfig(_Frozen):
    """Where downloaded files land."""

    base_dir: Path = Field(default=Path("downloads"), description="Root for all download destinations.")
    timeout: float | None = Field(
        default=30.0,
        gt=0,
        description="Network timeout in seconds; null leaves the transfer unbounded.",
    )

    @field_validator("base_dir")
    @classmethod
    def _absolute_base(cls, value: Path) -> Path:
        return _absolute(value)


class LogConfig(_Frozen):
    """Where log files may be read from."""

    base_dir: Path = Field(default=Path("logs_data"), description="Directory holding named log files.")
    default_file: str = Field(default="application.log", description="Log name with fallback lookup.")
    default_lines: int = Field(default=500, gt=0, description="Lines returned when none are requested.")
    working_dir: Path = Field(
        default_factory=Path.cwd,
        description="Process working directory, captured once at startup.",
    )

    @field_validator("base_dir", "working_dir")
    @classmethod
    def _absolute_paths(cls, value: Path) -> Path:
        return _absolute(value)

    @property
    def default_search_paths(self) -> tuple[Path, Path, Path]:
        """Locations checked, in order, for the default log file."""
        name = self.default_file
        return (
            self.base_dir / name,
            self.working_dir / name,
            self.working_dir / "logs" / name,
        )


class AuthSettings(_Frozen):
    """Single-user HTTP Basic credentials."""

    enabled: bool = True
    username: str = "user"
    password: str = "password"


class ServerSettings(_Frozen):
    """Bind address and route prefix for the HTTP layer."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=0, le=65535)
    prefix: str = "/api/system"


class TelemetrySettings(_Frozen):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServiceSettings(_Frozen):
    """Top-level settings parsed from YAML."""

    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    logs: LogConfig = Field(default_factory=LogConfig)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    def base_dirs(self) -> dict[str, Path]:
        """The three directories the service expects to exist."""
        return {
            "sandbox": self.sandbox.base_dir,
            "downloads": self.download.base_dir,
            "logs": self.logs.base_dir,
        }
