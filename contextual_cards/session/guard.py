"""Guard that decides whether an aggregate load completion is still wanted."""

import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from threading import Lock

import structlog


logger = structlog.get_logger()


class SessionState(str, Enum):
    """State of the load-session guard.

    - NO_SESSION: No load in flight
    - ACTIVE: A load was started and has not completed
    - SUPERSEDED: The active load was replaced by a newer one
    - ACCEPTED: The active load completed and its result is wanted
    - DISCARDED: A completion was rejected
    """

    NO_SESSION = "NO_SESSION"
    ACTIVE = "ACTIVE"
    SUPERSEDED = "SUPERSEDED"
    ACCEPTED = "ACCEPTED"
    DISCARDED = "DISCARDED"


class DiscardReason(str, Enum):
    """Why a completion was rejected."""

    NO_SESSION = "no_session"
    SUPERSEDED = "superseded"
    TIMED_OUT = "timed_out"


# Valid state transitions
_VALID_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.NO_SESSION: {SessionState.ACTIVE, SessionState.DISCARDED},
    SessionState.ACTIVE: {
        SessionState.ACCEPTED,
        SessionState.DISCARDED,
        SessionState.SUPERSEDED,
    },
    SessionState.SUPERSEDED: {SessionState.ACTIVE},
    # Decisions are terminal for their session; the guard resets right away
    SessionState.ACCEPTED: {SessionState.NO_SESSION},
    SessionState.DISCARDED: {SessionState.NO_SESSION},
}


class SessionStateTransitionError(Exception):
    """Raised when an illegal guard state transition is attempted."""

    def __init__(self, from_state: SessionState, to_state: SessionState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal load session transition: {from_state.value} -> {to_state.value}"
        )


@dataclass(frozen=True)
class LoadSession:
    """Handle for one aggregate load attempt.

    Attributes:
        session_id: Unique session identifier.
        started_at: Clock reading when the load was triggered, in seconds.
    """

    session_id: str
    started_at: float


@dataclass(frozen=True)
class SessionDecision:
    """Outcome of checking a completed load.

    Attributes:
        session_id: Session the completion belonged to, if known.
        state: ACCEPTED or DISCARDED.
        reason: Why the completion was discarded.
        elapsed_ms: Time since the session started, if it was active.
    """

    session_id: str | None
    state: SessionState
    reason: DiscardReason | None = None
    elapsed_ms: float | None = None

    @property
    def accepted(self) -> bool:
        """Check if the completion should be reconciled."""
        return self.state == SessionState.ACCEPTED


class LoadSessionGuard:
    """Tracks the single in-flight aggregate load.

    Only the completion of the currently active session can be accepted.
    A completion arriving with no active session, carrying the handle of a
    superseded session, or arriving after timeout_ms is discarded. Stale
    handles never disturb the active session.
    """

    def __init__(
        self,
        timeout_ms: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the guard.

        Args:
            timeout_ms: Maximum accepted load duration; None accepts any.
            clock: Monotonic clock returning seconds.
        """
        self._timeout_ms = timeout_ms
        self._clock = clock
        self._state = SessionState.NO_SESSION
        self._active: LoadSession | None = None
        self._lock = Lock()
        self._log = logger.bind(component="session_guard")

    @property
    def state(self) -> SessionState:
        """Get the current state."""
        with self._lock:
            return self._state

    @property
    def active_session(self) -> LoadSession | None:
        """Get the session currently in flight."""
        with self._lock:
            return self._active

    @property
    def timeout_ms(self) -> float | None:
        """Get the configured load timeout."""
        return self._timeout_ms

    def begin_session(self) -> LoadSession:
        """Start a new load session, superseding any active one.

        Returns:
            Handle to pass back with the completion.
        """
        session = LoadSession(session_id=uuid.uuid4().hex, started_at=self._clock())
        with self._lock:
            if self._state == SessionState.ACTIVE and self._active is not None:
                self._transition(SessionState.SUPERSEDED)
                self._log.info(
                    "session_superseded",
                    session_id=self._active.session_id,
                    superseded_by=session.session_id,
                )
            self._transition(SessionState.ACTIVE)
            self._active = session
        self._log.info("session_started", session_id=session.session_id)
        return session

    def decide(self, session: LoadSession | None = None) -> SessionDecision:
        """Decide whether a completed load should be reconciled.

        Args:
            session: Handle returned by begin_session(); None means the
                currently active session.

        Returns:
            The decision. The guard is back in NO_SESSION after deciding
            for the active session.
        """
        with self._lock:
            active = self._active
            if active is None:
                self._transition(SessionState.DISCARDED)
                self._transition(SessionState.NO_SESSION)
                decision = SessionDecision(
                    session_id=session.session_id if session else None,
                    state=SessionState.DISCARDED,
                    reason=DiscardReason.NO_SESSION,
                )
            elif session is not None and session.session_id != active.session_id:
                # Stale handle; the active session keeps waiting
                decision = SessionDecision(
                    session_id=session.session_id,
                    state=SessionState.DISCARDED,
                    reason=DiscardReason.SUPERSEDED,
                )
            else:
                elapsed_ms = (self._clock() - active.started_at) * 1000
                if self._timeout_ms is not None and elapsed_ms > self._timeout_ms:
                    outcome = SessionState.DISCARDED
                    reason: DiscardReason | None = DiscardReason.TIMED_OUT
                else:
                    outcome = SessionState.ACCEPTED
                    reason = None
                self._transition(outcome)
                self._transition(SessionState.NO_SESSION)
                self._active = None
                decision = SessionDecision(
                    session_id=active.session_id,
                    state=outcome,
                    reason=reason,
                    elapsed_ms=elapsed_ms,
                )

        if decision.accepted:
            self._log.info(
                "session_accepted",
                session_id=decision.session_id,
                elapsed_ms=round(decision.elapsed_ms or 0.0, 2),
            )
        else:
            self._log.info(
                "session_discarded",
                session_id=decision.session_id,
                reason=decision.reason.value if decision.reason else None,
                elapsed_ms=decision.elapsed_ms,
            )
        return decision

    def should_accept(self, session: LoadSession | None = None) -> bool:
        """Check whether a completed load should be reconciled.

        Args:
            session: Handle returned by begin_session().

        Returns:
            True if the completion should be reconciled and published.
        """
        return self.decide(session).accepted

    def _transition(self, target: SessionState) -> None:
        """Move to a new state. Caller must hold the lock.

        Raises:
            SessionStateTransitionError: If the transition is invalid.
        """
        if target not in _VALID_TRANSITIONS.get(self._state, set()):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise SessionStateTransitionError(self._state, target)
        self._state = target
