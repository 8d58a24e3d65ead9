"""Data models shared by the core operations."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Result of a command that ran to completion.

    A timed-out command never produces a result; it raises
    :class:`~cfs.errors.CommandTimeoutError` instead.
    """

    exit_code: int = Field(..., description="Process exit code.")
    output: str = Field(default="", description="Combined stdout and stderr, in arrival order.")

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
