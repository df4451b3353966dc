"""Serial job queue for single-writer state updates."""

from collections import deque
from collections.abc import Callable
from threading import Lock

import structlog


logger = structlog.get_logger()


class SerialDispatcher:
    """Runs submitted jobs one at a time, in submission order.

    Any thread may submit. The submitting thread drains the queue unless
    another thread is already draining, in which case that thread runs the
    job before it returns. A job submitted from inside a running job (for
    example by a listener or a producer callback) is queued and runs after
    the current job finishes, never nested inside it.
    """

    def __init__(self) -> None:
        """Initialize an empty dispatcher."""
        self._queue: deque[Callable[[], None]] = deque()
        self._queue_lock = Lock()
        self._drain_lock = Lock()
        self._log = logger.bind(component="dispatcher")

    def pending_count(self) -> int:
        """Get the number of queued jobs."""
        with self._queue_lock:
            return len(self._queue)

    def submit(self, job: Callable[[], None]) -> None:
        """Queue a job and drain the queue if no one else is.

        Args:
            job: Callable to run.
        """
        with self._queue_lock:
            self._queue.append(job)
        self._drain()

    def _drain(self) -> None:
        while True:
            if not self._drain_lock.acquire(blocking=False):
                return
            try:
                while True:
                    with self._queue_lock:
                        if not self._queue:
                            break
                        job = self._queue.popleft()
                    try:
                        job()
                    except Exception:  # noqa: BLE001
                        # One failing job must not stall the jobs queued behind it
                        self._log.exception("dispatch_job_failed")
            finally:
                self._drain_lock.release()

            # A job queued between the last check and the release has no drainer yet
            with self._queue_lock:
                if not self._queue:
                    return
