"""Core operations — path confinement, command execution, downloads and log tails."""

from cfs.core.downloader import Downloader
from cfs.core.logs import LogReader
from cfs.core.models import CommandResult
from cfs.core.paths import PathGuard
from cfs.core.runner import CommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Downloader",
    "LogReader",
    "PathGuard",
]
