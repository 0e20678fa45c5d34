"""WSGI server whose accept loop can be stopped and drained within a deadline."""

import selectors
import socket
import threading
from typing import Any, Callable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

from horusec_admin.bootstrap.config import ACCEPT_POLL_SECONDS, split_address
from horusec_admin.domain.log_fields import with_prefix
from horusec_admin.lifecycle.state import WorkerRegistry

TRANSPORT_LOGGER = with_prefix("transport")

WSGIApplication = Callable[..., Any]


class ServerClosed(Exception):
    """Raised by the accept loop when it ends because shutdown was requested."""


class LoggingRequestHandler(WSGIRequestHandler):
    """Request handler that writes access lines to the project logger."""

    def log_message(self, format: str, *args: Any) -> None:  # pylint: disable=redefined-builtin
        TRANSPORT_LOGGER.with_field("client", self.address_string()).debug(
            format % args
        )


class DrainingWSGIServer(WSGIServer):
    """Serves each connection on a tracked worker thread.

    ``stop_accepting`` only flips a flag; the accept loop notices it within
    ``ACCEPT_POLL_SECONDS`` and closes the listening socket itself.
    """

    daemon_threads = True

    def __init__(self, addr: str, application: WSGIApplication) -> None:
        host, port = split_address(addr)
        if ":" in host:
            self.address_family = socket.AF_INET6
        super().__init__((host, port), LoggingRequestHandler)
        self.set_app(application)
        self.workers = WorkerRegistry()
        self._closing = threading.Event()

    @property
    def closing(self) -> bool:
        return self._closing.is_set()

    def stop_accepting(self) -> None:
        self._closing.set()

    def serve_until_closed(self) -> None:
        """Run the accept loop; always ends by raising."""
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(self, selectors.EVENT_READ)
                while not self.closing:
                    ready = selector.select(ACCEPT_POLL_SECONDS)
                    if self.closing:
                        break
                    if ready:
                        self._handle_request_noblock()
        finally:
            self.server_close()
        raise ServerClosed()

    def process_request(self, request: Any, client_address: Any) -> None:
        thread = threading.Thread(
            target=self._process_request_thread,
            args=(request, client_address),
            name=f"http-worker-{client_address[0]}:{client_address[1]}",
            daemon=self.daemon_threads,
        )
        self.workers.register_worker(thread)
        thread.start()

    def _process_request_thread(self, request: Any, client_address: Any) -> None:
        try:
            self.finish_request(request, client_address)
        except Exception:  # pylint: disable=broad-except
            self.handle_error(request, client_address)
        finally:
            self.shutdown_request(request)
            self.workers.cleanup_worker(threading.current_thread())

    def handle_error(self, request: Any, client_address: Any) -> None:
        TRANSPORT_LOGGER.with_field(
            "client", f"{client_address[0]}:{client_address[1]}"
        ).exception("request handling failed")
