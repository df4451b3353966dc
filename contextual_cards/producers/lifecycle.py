"""Host lifecycle that producers can observe for background evaluation."""

from threading import Lock
from typing import Protocol, runtime_checkable

import structlog


logger = structlog.get_logger()


@runtime_checkable
class LifecycleObserver(Protocol):
    """Protocol for producers that need start/stop notifications."""

    def on_start(self) -> None:
        """Called when the host becomes visible."""
        ...

    def on_stop(self) -> None:
        """Called when the host is no longer visible."""
        ...


class Lifecycle:
    """Dispatches start/stop events to registered observers.

    An observer added while the lifecycle is started receives on_start()
    immediately. Observers are notified outside the internal lock so they
    may publish updates from their callbacks.
    """

    def __init__(self) -> None:
        """Initialize the lifecycle in the stopped state."""
        self._observers: list[LifecycleObserver] = []
        self._started = False
        self._lock = Lock()
        self._log = logger.bind(component="lifecycle")

    @property
    def is_started(self) -> bool:
        """Check if the lifecycle is started."""
        with self._lock:
            return self._started

    def add_observer(self, observer: LifecycleObserver) -> bool:
        """Register an observer.

        Args:
            observer: The observer to add.

        Returns:
            True if added, False if it was already registered.
        """
        with self._lock:
            if any(existing is observer for existing in self._observers):
                return False
            self._observers.append(observer)
            started = self._started

        self._log.debug("observer_added", observer=type(observer).__name__)
        if started:
            observer.on_start()
        return True

    def remove_observer(self, observer: LifecycleObserver) -> bool:
        """Unregister an observer.

        Args:
            observer: The observer to remove.

        Returns:
            True if removed, False if not found.
        """
        with self._lock:
            for index, existing in enumerate(self._observers):
                if existing is observer:
                    del self._observers[index]
                    return True
            return False

    def observers(self) -> list[LifecycleObserver]:
        """List registered observers."""
        with self._lock:
            return list(self._observers)

    def start(self) -> None:
        """Move to started and notify observers."""
        with self._lock:
            if self._started:
                return
            self._started = True
            observers = list(self._observers)

        self._log.info("lifecycle_started", observer_count=len(observers))
        for observer in observers:
            observer.on_start()

    def stop(self) -> None:
        """Move to stopped and notify observers."""
        with self._lock:
            if not self._started:
                return
            self._started = False
            observers = list(self._observers)

        self._log.info("lifecycle_stopped", observer_count=len(observers))
        for observer in observers:
            observer.on_stop()
