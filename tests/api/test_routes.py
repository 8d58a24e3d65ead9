"""Tests for the system routes through the FastAPI app."""

from __future__ import annotations

import os

from fastapi.testclient import TestClient

from cfs.config.models import ServiceSettings

PREFIX = "/api/system"


def _is_text(response) -> bool:
    return response.headers["content-type"].startswith("text/plain")


class TestExecuteRoute:
    def test_success(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={"command": "echo hello"})
        assert response.status_code == 200
        assert _is_text(response)
        assert response.text == "hello" + os.linesep

    def test_runs_in_sandbox(self, client: TestClient, settings: ServiceSettings) -> None:
        (settings.sandbox.base_dir / "inside.txt").write_text("")
        response = client.post(f"{PREFIX}/execute", json={"command": "ls"})
        assert "inside.txt" in response.text

    def test_nonzero_exit(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={"command": "echo oops\nexit 2"})
        assert response.status_code == 500
        assert response.text == f"Command failed with exit code 2{os.linesep}oops{os.linesep}"

    def test_blocked_sequence(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={"command": "echo hi; rm -rf /"})
        assert response.status_code == 400
        assert _is_text(response)
        assert response.text == "Invalid characters in command. Execution restricted."

    def test_empty_command(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={"command": "  "})
        assert response.status_code == 400
        assert response.text == "Command cannot be empty."

    def test_missing_command_field(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={})
        assert response.status_code == 400
        assert response.text == "Command cannot be empty."

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post(
            f"{PREFIX}/execute",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.text.startswith("Invalid request:")

    def test_timeout(self, client: TestClient) -> None:
        response = client.post(f"{PREFIX}/execute", json={"command": "sleep 10"})
        assert response.status_code == 504
        assert "timed out" in response.text

    def test_missing_sandbox(self, client: TestClient, settings: ServiceSettings) -> None:
        settings.sandbox.base_dir.rmdir()
        response = client.post(f"{PREFIX}/execute", json={"command": "echo hi"})
        assert response.status_code == 500
        assert response.text == "Sandbox directory misconfiguration. Please contact administrator."


class TestDownloadRoute:
    def test_success(self, client: TestClient, settings: ServiceSettings) -> None:
        response = client.get(
            f"{PREFIX}/download",
            params={"url": "https://files.example.com/data.csv", "destination": "in/data.csv"},
        )
        target = settings.download.base_dir / "in" / "data.csv"
        assert response.status_code == 200
        assert _is_text(response)
        assert response.text == f"File downloaded successfully to: {target}"
        assert target.read_bytes() == b"served /data.csv"

    def test_traversal(self, client: TestClient, settings: ServiceSettings) -> None:
        response = client.get(
            f"{PREFIX}/download",
            params={"url": "https://files.example.com/data.csv", "destination": "../escape.csv"},
        )
        assert response.status_code == 400
        assert "traversal" in response.text
        assert not (settings.download.base_dir.parent / "escape.csv").exists()

    def test_invalid_url(self, client: TestClient) -> None:
        response = client.get(f"{PREFIX}/download", params={"url": "nope", "destination": "x"})
        assert response.status_code == 400
        assert response.text.startswith("Invalid URL format")

    def test_remote_failure(self, client: TestClient) -> None:
        response = client.get(
            f"{PREFIX}/download",
            params={"url": "https://files.example.com/missing", "destination": "x"},
        )
        assert response.status_code == 500
        assert response.text.startswith("Error downloading file")

    def test_missing_parameters(self, client: TestClient) -> None:
        response = client.get(f"{PREFIX}/download", params={"url": "https://example.com/"})
        assert response.status_code == 400
        assert "destination" in response.text


class TestLogsRoute:
    def test_tail_named_file(self, client: TestClient, settings: ServiceSettings) -> None:
        (settings.logs.base_dir / "app.log").write_text("".join(f"Line {i}\n" for i in range(1, 11)))
        response = client.get(f"{PREFIX}/logs", params={"file": "app.log", "lines": 3})
        assert response.status_code == 200
        assert _is_text(response)
        assert response.text == os.linesep.join(["Line 8", "Line 9", "Line 10"])

    def test_default_file_and_lines(self, client: TestClient, settings: ServiceSettings) -> None:
        (settings.logs.working_dir / "application.log").write_text("".join(f"{i}\n" for i in range(600)))
        response = client.get(f"{PREFIX}/logs")
        lines = response.text.split(os.linesep)
        assert response.status_code == 200
        assert len(lines) == 500
        assert lines[-1] == "599"

    def test_traversal_rejected(self, client: TestClient) -> None:
        response = client.get(f"{PREFIX}/logs", params={"file": "../secrets.txt"})
        assert response.status_code == 400

    def test_missing_file(self, client: TestClient) -> None:
        response = client.get(f"{PREFIX}/logs", params={"file": "missing.log"})
        assert response.status_code == 404
        assert "missing.log" in response.text

    def test_default_not_found_lists_locations(self, client: TestClient, settings: ServiceSettings) -> None:
        response = client.get(f"{PREFIX}/logs")
        assert response.status_code == 404
        for location in settings.logs.default_search_paths:
            assert str(location) in response.text

    def test_huge_line_count(self, client: TestClient, settings: ServiceSettings) -> None:
        (settings.logs.base_dir / "app.log").write_text("one\ntwo\n")
        response = client.get(f"{PREFIX}/logs", params={"file": "app.log", "lines": str(10**20)})
        assert response.status_code == 200
        assert response.text == f"one{os.linesep}two"

    def test_non_numeric_lines(self, client: TestClient) -> None:
        response = client.get(f"{PREFIX}/logs", params={"lines": "many"})
        assert response.status_code == 400
        assert response.text.startswith("Invalid request:")


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": "0.1.0"}
