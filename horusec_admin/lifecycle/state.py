"""Server lifecycle states and worker thread tracking."""

import enum
import threading
import time

from horusec_admin.domain.log_fields import with_prefix

LIFECYCLE_LOGGER = with_prefix("lifecycle")


class LifecycleState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class WorkerRegistry:
    """Tracks request worker threads so shutdown can wait for them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._workers: set[threading.Thread] = set()

    def register_worker(self, thread: threading.Thread) -> None:
        """Register a worker thread for tracking."""
        with self._lock:
            self._workers.add(thread)

    def cleanup_worker(self, thread: threading.Thread) -> None:
        """Remove a worker thread from tracking."""
        with self._lock:
            self._workers.discard(thread)

    def active_worker_count(self) -> int:
        """Return the number of currently tracked worker threads."""
        with self._lock:
            return len(self._workers)

    def wait_for_workers(self, timeout: float) -> bool:
        """Wait for all worker threads to complete within the timeout."""
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                self._workers = {
                    w for w in self._workers if w.is_alive() or w.ident is None
                }
                active_workers = list(self._workers)
            if not active_workers:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                LIFECYCLE_LOGGER.with_field(
                    "remaining_workers", len(active_workers)
                ).warning("shutdown timeout exceeded")
                return False
            for worker in active_workers:
                if worker.ident is None:
                    time.sleep(min(0.01, remaining))
                    continue
                worker.join(timeout=min(0.1, remaining))
                if time.monotonic() >= deadline:
                    break
