"""System WSGI application serving health checks."""

import json
from typing import Any, Callable, Iterable, Optional

from horusec_admin.domain.log_fields import with_prefix
from horusec_admin.lifecycle.state import LifecycleState

SYSTEM_LOGGER = with_prefix("handlers.system")

SECURITY_HEADERS = [
    ("X-Content-Type-Options", "nosniff"),
    ("Content-Security-Policy", "default-src 'self'"),
]


class SystemApplication:
    """Answers ``/healthz`` with the listener state; everything else is 404.

    ``lifecycle`` is attached after construction because the lifecycle
    itself needs the application.
    """

    def __init__(self, lifecycle: Optional[Any] = None) -> None:
        self.lifecycle = lifecycle

    def _state(self) -> LifecycleState:
        if self.lifecycle is None:
            return LifecycleState.RUNNING
        return self.lifecycle.state

    def __call__(
        self, environ: dict, start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "/")
        if path != "/healthz":
            return self._respond(start_response, "404 Not Found", {"error": "not found"})

        state = self._state()
        healthy = state is LifecycleState.RUNNING
        SYSTEM_LOGGER.with_field("state", state.value).debug("health check performed")
        status = "200 OK" if healthy else "503 Service Unavailable"
        return self._respond(start_response, status, {"status": state.value})

    @staticmethod
    def _respond(
        start_response: Callable[..., Any], status: str, payload: dict
    ) -> Iterable[bytes]:
        body = json.dumps(payload, sort_keys=True).encode("utf-8")
        headers = [
            ("Content-Type", "application/json"),
            ("Content-Length", str(len(body))),
        ]
        start_response(status, headers + SECURITY_HEADERS)
        return [body]
