"""Bootstrap constants, environment defaults and CLI argument parsing."""

import argparse
import os
from typing import Optional

ADDR = ":3000"
SHUTDOWN_TIMEOUT = 5.0
ACCEPT_POLL_SECONDS = 0.5


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    return value if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


DEFAULT_CONFIG_PATH = _env_str("HORUSEC_ADMIN_CONFIG", None)
DEFAULT_ADDR = _env_str("HORUSEC_ADMIN_ADDR", ADDR)
DEFAULT_LOG_JSON = _env_bool("HORUSEC_ADMIN_LOG_JSON", True)


def split_address(addr: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address; an empty host means all interfaces."""
    host, separator, port = addr.rpartition(":")
    if not separator or not port.isdigit():
        raise ValueError(f"invalid listen address {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    number = int(port)
    if number > 65535:
        raise ValueError(f"invalid listen address {addr!r}: port out of range")
    return host, number


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for the admin backend."""
    parser = argparse.ArgumentParser(description="Horusec admin backend")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the JSON configuration file",
    )
    parser.add_argument(
        "--addr",
        default=DEFAULT_ADDR,
        help=f"Listen address (default: {ADDR})",
    )
    default_log_level = os.getenv("HORUSEC_ADMIN_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("HORUSEC_ADMIN_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-json",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_LOG_JSON,
        help="Emit structured JSON log lines",
    )
    return parser.parse_args(argv)
