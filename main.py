"""Horusec admin backend entry point."""

import signal
import sys
import threading
from typing import Optional

from horusec_admin.bootstrap.config import parse_cli_args
from horusec_admin.bootstrap.logging_setup import configure_logging
from horusec_admin.domain.accessors import ConfigurationResolver
from horusec_admin.domain.configuration import Configuration, load_configuration
from horusec_admin.domain.errors import ConfigurationError, ShutdownError
from horusec_admin.domain.log_fields import with_prefix
from horusec_admin.handlers.system_handlers import SystemApplication
from horusec_admin.lifecycle.server import ServerLifecycle

MAIN_LOGGER = with_prefix("main")


def _resolve_configuration(config_path: Optional[str]) -> None:
    """Load and resolve the configuration, raising on malformed endpoints."""
    configuration = (
        load_configuration(config_path) if config_path else Configuration()
    )
    resolver = ConfigurationResolver(configuration)
    endpoints = resolver.resolve_endpoints()
    log = MAIN_LOGGER.with_field("auth_type", resolver.resolve_auth_type() or "default")
    if endpoints is None:
        log.info("manager endpoints not configured")
    else:
        log.with_field("manager_url", endpoints.manager.geturl()).with_field(
            "api_url", endpoints.api.geturl()
        ).info("configuration resolved")


def main() -> None:
    """Resolve configuration, start the listener and wait for a stop signal."""
    args = parse_cli_args(sys.argv[1:])
    configure_logging(args.log_level, args.log_destination, args.log_json)

    try:
        _resolve_configuration(args.config)
    except ConfigurationError as error:
        MAIN_LOGGER.with_error(error).fatal("invalid configuration")
        sys.exit(1)

    application = SystemApplication()
    lifecycle = ServerLifecycle(application, addr=args.addr)
    application.lifecycle = lifecycle

    stop_requested = threading.Event()

    def shutdown_handler(signum: int, _frame) -> None:
        MAIN_LOGGER.with_field("signal", signum).info("received shutdown signal")
        stop_requested.set()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    lifecycle.start()
    while not stop_requested.wait(0.5):
        pass

    try:
        lifecycle.gracefully_shutdown()
    except ShutdownError as error:
        MAIN_LOGGER.with_error(error).error("graceful shutdown failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
