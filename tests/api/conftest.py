"""Shared fixtures for HTTP layer tests."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from cfs.api.auth import AllowAllAuthorizer
from cfs.api.app import create_app
from cfs.config.models import DownloadConfig, LogConfig, SandboxConfig, ServiceSettings


def remote_file(request: httpx.Request) -> httpx.Response:
    """Serve ``/missing`` as 404 and everything else as the request path."""
    if request.url.path == "/missing":
        return httpx.Response(404)
    return httpx.Response(200, content=f"served {request.url.path}".encode())


@pytest.fixture
def settings(tmp_path: Path) -> ServiceSettings:
    for name in ("sandbox", "downloads", "logs_data", "work"):
        (tmp_path / name).mkdir()
    return ServiceSettings(
        sandbox=SandboxConfig(base_dir=tmp_path / "sandbox", timeout=1.0),
        download=DownloadConfig(base_dir=tmp_path / "downloads"),
        logs=LogConfig(base_dir=tmp_path / "logs_data", working_dir=tmp_path / "work"),
    )


@pytest.fixture
def client(settings: ServiceSettings):
    app = create_app(
        settings,
        authorizer=AllowAllAuthorizer(),
        download_transport=httpx.MockTransport(remote_file),
    )
    with TestClient(app) as test_client:
        yield test_client
