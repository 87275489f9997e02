"""Server lifecycle state management."""

import threading
from concurrent.futures import Future, wait

from fileserver.domain.correlation_id import get_logger

LIFECYCLE_LOGGER = get_logger("lifecycle")


class ServerLifecycle:
    """Tracks the stop flag and the connections still being handled."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._pending: set[Future] = set()

    def should_stop(self) -> bool:
        """Check if the server should stop accepting new connections."""
        return self._stop_event.is_set()

    def begin_draining(self) -> None:
        """Signal the accept loop to stop and let in-flight work finish."""
        self._stop_event.set()
        LIFECYCLE_LOGGER.info("Beginning graceful shutdown")

    def register_worker(self, future: Future) -> None:
        """Track a submitted connection until it completes."""
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self.cleanup_worker)

    def cleanup_worker(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def has_worker(self, future: Future) -> bool:
        with self._lock:
            return future in self._pending

    def active_worker_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait_for_workers(self, timeout: float) -> bool:
        """Wait for tracked connections to finish; False if the timeout expired."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            LIFECYCLE_LOGGER.warning(
                "Shutdown timeout exceeded",
                extra={"active_connections": len(not_done)},
            )
            return False
        return True
