"""Load-session tracking for aggregate card loads."""

from contextual_cards.session.guard import (
    DiscardReason,
    LoadSession,
    LoadSessionGuard,
    SessionDecision,
    SessionState,
    SessionStateTransitionError,
)


__all__ = [
    "DiscardReason",
    "LoadSession",
    "LoadSessionGuard",
    "SessionDecision",
    "SessionState",
    "SessionStateTransitionError",
]
