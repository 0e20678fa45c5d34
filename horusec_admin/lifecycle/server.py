"""HTTP listener lifecycle: background start and deadline-bounded graceful shutdown."""

import logging
import os
import threading
import time
from typing import Callable, Optional

from horusec_admin.bootstrap.config import ADDR, SHUTDOWN_TIMEOUT
from horusec_admin.domain.errors import LifecycleStateError, ShutdownError
from horusec_admin.domain.log_fields import with_prefix
from horusec_admin.lifecycle.state import LifecycleState
from horusec_admin.transport.wsgi_server import (
    DrainingWSGIServer,
    ServerClosed,
    WSGIApplication,
)

FatalHandler = Callable[[BaseException], None]


def terminate_process(_error: BaseException) -> None:
    """Flush logging and exit the process with status 1."""
    logging.shutdown()
    os._exit(1)  # pylint: disable=protected-access


class ServerLifecycle:
    """Owns the HTTP listener for its whole lifetime.

    ``start`` returns once the accept loop is scheduled, not once it is
    bound. ``gracefully_shutdown`` stops accepting, drains in-flight
    requests and raises ``ShutdownError`` if that takes longer than
    ``shutdown_timeout`` seconds.
    """

    def __init__(
        self,
        handler: WSGIApplication,
        addr: str = ADDR,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
        on_fatal: Optional[FatalHandler] = None,
    ) -> None:
        self._handler = handler
        self._addr = addr
        self._shutdown_timeout = shutdown_timeout
        self._on_fatal = on_fatal or terminate_process
        self._state = LifecycleState.CREATED
        self._state_lock = threading.Lock()
        self._server: Optional[DrainingWSGIServer] = None
        self._bound = threading.Event()
        self._serve_thread: Optional[threading.Thread] = None
        self._log = with_prefix("server")

    @property
    def addr(self) -> str:
        return self._addr

    @property
    def state(self) -> LifecycleState:
        with self._state_lock:
            return self._state

    @property
    def server_address(self) -> Optional[tuple]:
        """The bound socket address, or None before the listener is bound."""
        if self._server is None:
            return None
        return self._server.server_address

    def wait_until_bound(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener thread has tried to bind."""
        return self._bound.wait(timeout)

    def start(self) -> "ServerLifecycle":
        with self._state_lock:
            if self._state is not LifecycleState.CREATED:
                raise LifecycleStateError(
                    f"cannot start server in state {self._state.value}"
                )
            self._state = LifecycleState.RUNNING

        self._serve_thread = threading.Thread(
            target=self._serve, name="http-listener", daemon=True
        )
        self._serve_thread.start()
        return self

    def _serve(self) -> None:
        log = self._log.with_field("addr", self._addr)
        try:
            try:
                self._server = DrainingWSGIServer(self._addr, self._handler)
            finally:
                self._bound.set()
            host, port = self._server.server_address[:2]
            log.with_field("host", host).with_field("port", port).info("listening")
            self._server.serve_until_closed()
        except ServerClosed:
            log.debug("listener closed")
        except Exception as error:  # pylint: disable=broad-except
            log.with_error(error).fatal("listen error")
            self._on_fatal(error)

    def gracefully_shutdown(self) -> None:
        deadline = time.monotonic() + self._shutdown_timeout
        with self._state_lock:
            if self._state is LifecycleState.STOPPED:
                return
            if self._state is LifecycleState.SHUTTING_DOWN:
                raise LifecycleStateError("server is already shutting down")
            if self._state is LifecycleState.CREATED:
                self._state = LifecycleState.STOPPED
                return
            self._state = LifecycleState.SHUTTING_DOWN

        self._log.warning("shutting down server")
        try:
            self._drain(deadline)
        except (TimeoutError, OSError) as error:
            raise ShutdownError(error) from error
        finally:
            with self._state_lock:
                self._state = LifecycleState.STOPPED

    def _drain(self, deadline: float) -> None:
        if not self._bound.wait(max(0.0, deadline - time.monotonic())):
            raise TimeoutError("listener did not bind before the shutdown deadline")

        server = self._server
        if server is None:
            # Bind failed; the fatal handler has already been invoked.
            return

        server.stop_accepting()
        if self._serve_thread is not None:
            self._serve_thread.join(max(0.0, deadline - time.monotonic()))
            if self._serve_thread.is_alive():
                raise TimeoutError("accept loop did not exit before the shutdown deadline")

        if not server.workers.wait_for_workers(max(0.0, deadline - time.monotonic())):
            raise TimeoutError(
                f"{server.workers.active_worker_count()} request(s) still in flight "
                f"after {self._shutdown_timeout}s"
            )
        self._log.info("server stopped")
