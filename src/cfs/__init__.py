"""cmd-file-service — sandboxed command execution, confined downloads and log tails over HTTP."""

from __future__ import annotations

__version__ = "0.1.0"
