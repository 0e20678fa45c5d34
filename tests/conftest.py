"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Generator, TypedDict

import pytest

from tests.utils.http import reserve_port, wait_for_port
from tests.utils.process import PROJECT_ROOT, launch_server

SAMPLE_CONFIGURATION = {
    "auth": {"type": "horusec"},
    "manager": {
        "account_endpoint": "http://127.0.0.1:8003",
        "analytic_endpoint": "http://127.0.0.1:8005",
        "api_endpoint": "http://127.0.0.1:8000",
        "auth_endpoint": "http://127.0.0.1:8006",
        "manager_endpoint": "http://127.0.0.1:8043",
    },
}


class ServerProcessInfo(TypedDict):
    """Metadata describing a running server fixture instance."""

    base_url: str
    host: str
    port: int
    process: subprocess.Popen[str]
    log_file: Path


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write a valid configuration file for the backend."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(SAMPLE_CONFIGURATION), encoding="utf-8")
    return path


@pytest.fixture(name="server_process")
def _server_process(
    tmp_path: Path, config_file: Path
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the admin backend in a background process for integration tests."""

    host = "127.0.0.1"
    port = reserve_port(host)
    log_file = tmp_path / "admin.log"
    with launch_server(host, port, config_file, log_file) as process:
        try:
            wait_for_port(host, port)
        except Exception:
            # If startup failed, print stdout/stderr to help debug
            process.terminate()
            stdout, stderr = process.communicate(timeout=5)
            print(f"\nServer stdout:\n{stdout}")
            print(f"\nServer stderr:\n{stderr}")
            raise

        yield {
            "base_url": f"http://{host}:{port}",
            "host": host,
            "port": port,
            "process": process,
            "log_file": log_file,
        }

        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=7)
            except subprocess.TimeoutExpired:
                process.kill()
