"""Downloader — streams a remote file into the downloads directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from cfs.core.paths import PathGuard
from cfs.errors import ConfigurationError, ExecutionError, InvalidInputError
from cfs.utils.telemetry import (
    ATTR_DOWNLOAD_BYTES,
    ATTR_DOWNLOAD_PATH,
    ATTR_DOWNLOAD_URL,
    get_tracer,
    operation_span,
)

if TYPE_CHECKING:
    from pathlib import Path

    from cfs.config.models import DownloadConfig

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SUPPORTED_SCHEMES = frozenset({"http", "https"})


def validate_url(url: str | None) -> httpx.URL:
    """Parse *url* and check it is an absolute http(s) URL with a host.

    Raises:
        InvalidInputError: If the URL is missing, malformed or unsupported.
    """
    if not url or not url.strip():
        raise InvalidInputError("Invalid URL format: URL is empty")
    if any(ch.isspace() for ch in url):
        raise InvalidInputError(f"Invalid URL format: whitespace in {url!r}")
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidInputError(f"Invalid URL format: {exc}") from exc
    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise InvalidInputError(f"Invalid URL format: unsupported scheme in {url!r}")
    if not parsed.host:
        raise InvalidInputError(f"Invalid URL format: no host in {url!r}")
    return parsed


class Downloader:
    """Fetch URLs into files confined to the configured downloads directory.

    Existing files are overwritten. A transfer that fails midway may leave a
    truncated file behind; nothing is cleaned up and nothing is retried.
    """

    def __init__(
        self,
        config: DownloadConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._guard = PathGuard(config.base_dir)
        self._transport = transport

    @property
    def config(self) -> DownloadConfig:
        return self._config

    async def download(self, url: str | None, destination: str) -> Path:
        """Download *url* to *destination* (relative to the downloads directory).

        Checks run in order, and all of them before any network access: URL
        syntax, destination containment, downloads directory presence.

        Returns:
            The absolute path of the written file.

        Raises:
            InvalidInputError: Malformed URL.
            TraversalError: *destination* escapes the downloads directory.
            ConfigurationError: The downloads directory is missing.
            ExecutionError: Network or filesystem failure during the transfer.
        """
        parsed = validate_url(url)
        try:
            target = self._guard.resolve(destination)
        except InvalidInputError:
            logger.warning("Rejected download destination %r", destination)
            raise

        base_dir = self._config.base_dir
        if not base_dir.is_dir():
            logger.error("Base download directory '%s' does not exist or is not a directory.", base_dir)
            raise ConfigurationError(
                str(base_dir),
                "Download directory misconfiguration. Please contact administrator.",
            )

        attributes = {ATTR_DOWNLOAD_URL: str(parsed), ATTR_DOWNLOAD_PATH: str(target)}
        with operation_span(_tracer, "cfs.download", attributes) as span:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                written = await self._fetch(parsed, target)
            except httpx.HTTPError as exc:
                logger.error("Error downloading file from URL '%s' to '%s': %s", url, target, exc)
                raise ExecutionError(f"Error downloading file: {exc}") from exc
            except OSError as exc:
                logger.error("Error writing download from URL '%s' to '%s': %s", url, target, exc)
                raise ExecutionError(f"Error downloading file: {exc}") from exc
            span.set_attribute(ATTR_DOWNLOAD_BYTES, written)

        logger.info("Downloaded %s to %s (%d bytes)", url, target, written)
        return target

    async def _fetch(self, url: httpx.URL, target: Path) -> int:
        """Stream the body of *url* into *target*; return the byte count."""
        written = 0
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self._config.timeout,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with target.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
                        written += len(chunk)
        return written
