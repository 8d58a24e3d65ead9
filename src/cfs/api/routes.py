"""FastAPI routes for the system operations.

Endpoints (all under the configured prefix, ``/api/system`` by default):
- POST /execute   - Run a shell command in the sandbox directory
- GET  /download  - Fetch a URL into the downloads directory
- GET  /logs      - Tail a log file

Every route depends on :func:`require_authorization`. Core errors propagate
as :class:`~cfs.errors.ServiceError` and are rendered by the app's handler.
"""

from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from cfs.api.auth import AuthorizationError, Authorizer
from cfs.api.schemas import ExecuteRequest
from cfs.core.downloader import Downloader
from cfs.core.logs import LogReader
from cfs.core.runner import CommandRunner

logger = logging.getLogger(__name__)
router = APIRouter(tags=["system"])

_basic = HTTPBasic(auto_error=False)


# =============================================================================
# Dependencies
# =============================================================================

def require_authorization(
    request: Request,
    credentials: HTTPBasicCredentials | None = Depends(_basic),
) -> str:
    """Ask the app's :class:`Authorizer`; answer 401 on refusal."""
    authorizer: Authorizer = request.app.state.authorizer
    try:
        return authorizer.authorize(credentials)
    except AuthorizationError as exc:
        raise HTTPException(
            status_code=401,
            detail=exc.reason,
            headers={"WWW-Authenticate": "Basic"},
        ) from exc


def get_runner(request: Request) -> CommandRunner:
    return request.app.state.runner


def get_downloader(request: Request) -> Downloader:
    return request.app.state.downloader


def get_log_reader(request: Request) -> LogReader:
    return request.app.state.log_reader


# =============================================================================
# Operations
# =============================================================================

@router.post("/execute", response_class=PlainTextResponse)
async def execute_command(
    payload: ExecuteRequest,
    runner: CommandRunner = Depends(get_runner),
) -> PlainTextResponse:
    """Execute a command in the sandbox directory.

    Returns the merged stdout/stderr on success, 500 with the exit code on a
    nonzero exit, and 504 if the command times out.
    """
    result = await runner.execute(payload.command)
    if result.ok:
        return PlainTextResponse(result.output)
    return PlainTextResponse(
        f"Command failed with exit code {result.exit_code}{os.linesep}{result.output}",
        status_code=500,
    )


@router.get("/download", response_class=PlainTextResponse)
async def download_file(
    url: str = Query(..., description="URL of the file to download."),
    destination: str = Query(..., description="Destination path inside the downloads directory."),
    downloader: Downloader = Depends(get_downloader),
) -> PlainTextResponse:
    """Download a file from *url* to *destination*."""
    path = await downloader.download(url, destination)
    return PlainTextResponse(f"File downloaded successfully to: {path}")


@router.get("/logs", response_class=PlainTextResponse)
def get_logs(
    lines: int | None = Query(default=None, description="Trailing lines to return (default 500)."),
    file: str | None = Query(default=None, description="Log file name; defaults to the default log file."),
    reader: LogReader = Depends(get_log_reader),
) -> PlainTextResponse:
    """Return the trailing lines of a log file."""
    name = file if file is not None else reader.config.default_file
    return PlainTextResponse(reader.tail(name, lines))
