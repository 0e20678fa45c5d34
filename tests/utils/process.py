"""Helpers for running main.py as a subprocess in tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SERVER_ENTRYPOINT = PROJECT_ROOT / "main.py"


def launch_server(
    host: str,
    port: int,
    config_file: Path,
    log_file: Path,
) -> subprocess.Popen[str]:
    """Start main.py in a subprocess listening on host:port."""
    args = [
        sys.executable,
        str(SERVER_ENTRYPOINT),
        "--addr",
        f"{host}:{port}",
        "--config",
        str(config_file),
        "--log-destination",
        str(log_file),
    ]
    return subprocess.Popen(
        args,
        cwd=PROJECT_ROOT,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
