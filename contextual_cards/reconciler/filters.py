"""Stability filters applied to a merged card list."""

from collections.abc import Sequence
from threading import Lock

import structlog

from contextual_cards.cards.models import CONDITIONAL_CARD_TYPES, Card


logger = structlog.get_logger()


class FirstLaunchFilter:
    """Restricts the first pass after process start to previously shown cards.

    A cold restart should not flash a different card set than the one the
    user last saw. The allow-list of names is handed in by the persistence
    collaborator; an absent or empty list leaves the first pass untouched.
    Conditional cards are evaluated locally and always pass. The
    first-launch flag flips exactly once, on the first call to apply().
    """

    def __init__(self, saved_card_names: Sequence[str] | None = None) -> None:
        """Initialize the filter.

        Args:
            saved_card_names: Names shown before the restart, if any.
        """
        self._saved_names = frozenset(saved_card_names) if saved_card_names else None
        self._first_launch = True
        self._lock = Lock()
        self._log = logger.bind(component="first_launch_filter")

    @property
    def is_first_launch(self) -> bool:
        """Check if the first pass has not happened yet."""
        with self._lock:
            return self._first_launch

    @property
    def has_saved_cards(self) -> bool:
        """Check if an allow-list is available."""
        return self._saved_names is not None

    def apply(self, cards: Sequence[Card]) -> list[Card]:
        """Filter a merged card list.

        Args:
            cards: Merged cards in display order.

        Returns:
            Cards allowed on this pass, order preserved.
        """
        with self._lock:
            first_launch = self._first_launch
            self._first_launch = False

        if not first_launch or self._saved_names is None:
            return list(cards)

        kept = [
            card
            for card in cards
            if card.name in self._saved_names
            or card.card_type in CONDITIONAL_CARD_TYPES
        ]
        self._log.info(
            "first_launch_filter_applied",
            cards_in=len(cards),
            cards_kept=len(kept),
            saved_count=len(self._saved_names),
        )
        return kept


def keep_displayed_cards(
    cards: Sequence[Card],
    displayed: Sequence[Card],
) -> list[Card]:
    """Keep only cards whose names are already on screen.

    Used on reloads (navigating back, rotation, after a dismissal) so that
    newly eligible cards do not pop into a page the user is looking at.

    Args:
        cards: Merged cards in display order.
        displayed: Cards currently published.

    Returns:
        Cards already displayed, order preserved.
    """
    displayed_names = {card.name for card in displayed}
    return [card for card in cards if card.name in displayed_names]
