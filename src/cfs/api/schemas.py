"""Pydantic request schemas for the HTTP layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ExecuteRequest(BaseModel):
    """Run a single shell command in the sandbox directory."""

    command: str | None = Field(
        default=None,
        description="Command passed to '<shell> -c'. Must not contain '..', ';', '&&', '||', '|' or backticks.",
        json_schema_extra={"examples": ["ls -la", "echo hello"]},
    )
