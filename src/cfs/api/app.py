"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from cfs import __version__
from cfs.api.auth import authorizer_from_settings
from cfs.api.routes import require_authorization, router
from cfs.config.models import ServiceSettings
from cfs.core.downloader import Downloader
from cfs.core.logs import LogReader
from cfs.core.runner import CommandRunner
from cfs.errors import ServiceError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

    from cfs.api.auth import Authorizer

logger = logging.getLogger(__name__)


def create_app(
    settings: ServiceSettings | None = None,
    *,
    authorizer: Authorizer | None = None,
    download_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the service app from *settings*.

    *authorizer* overrides the one derived from ``settings.auth``;
    *download_transport* is handed to the :class:`Downloader` (tests).
    """
    settings = settings or ServiceSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting cmd-file-service v%s", __version__)
        for label, path in settings.base_dirs().items():
            logger.info("%s directory configured to: %s", label.capitalize(), path)
            if not path.is_dir():
                logger.warning(
                    "%s directory %s does not exist; requests using it will fail until it is created.",
                    label.capitalize(),
                    path,
                )
        logger.info("Default log file configured to: %s", settings.logs.default_file)
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title="cmd-file-service",
        version=__version__,
        description="Run sandboxed commands, download files and tail logs.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.authorizer = authorizer or authorizer_from_settings(settings.auth)
    app.state.runner = CommandRunner(settings.sandbox)
    app.state.downloader = Downloader(settings.download, transport=download_transport)
    app.state.log_reader = LogReader(settings.logs)

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(
        router,
        prefix=settings.server.prefix,
        dependencies=[Depends(require_authorization)],
    )

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    return app


async def _service_error_handler(request: Request, exc: ServiceError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return PlainTextResponse("Invalid request: " + "; ".join(problems), status_code=400)
