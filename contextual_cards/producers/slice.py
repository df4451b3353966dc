"""Producer for externally sourced slice cards."""

from collections.abc import Sequence
from threading import Lock

from contextual_cards.cards.models import Card, CardType
from contextual_cards.producers.base import BaseCardProducer


class SliceCardProducer(BaseCardProducer):
    """Owns SLICE cards and handles their dismissal.

    Slice cards normally arrive through the aggregate loader. This producer
    remembers the slice cards last displayed so that dismissing one can push
    the remainder without waiting for the next load. Dismissed names are
    never republished by this producer; keeping them out of later loads is
    up to the card sources.
    """

    card_types = frozenset({CardType.SLICE})

    def __init__(self, producer_id: str | None = None) -> None:
        """Initialize the producer.

        Args:
            producer_id: Identifier for logs.
        """
        super().__init__(producer_id)
        self._cards: list[Card] = []
        self._dismissed: set[str] = set()
        self._lock = Lock()

    @property
    def dismissed_names(self) -> frozenset[str]:
        """Get names dismissed so far."""
        with self._lock:
            return frozenset(self._dismissed)

    def on_cards_displayed(self, cards: Sequence[Card]) -> None:
        """Remember the slice cards currently shown.

        Args:
            cards: Displayed cards; non-slice cards are ignored.
        """
        with self._lock:
            self._cards = [card for card in cards if card.card_type == CardType.SLICE]

    def dismiss(self, name: str) -> bool:
        """Hide a slice card and publish the remaining ones.

        Args:
            name: Name of the card to dismiss.

        Returns:
            True if an update was delivered.
        """
        with self._lock:
            self._dismissed.add(name)
        self._log.info("slice_card_dismissed", card_name=name)
        return self._publish_visible()

    def refresh(self) -> None:
        """Republish the tracked slice cards that are not dismissed."""
        self._publish_visible()

    def _publish_visible(self) -> bool:
        with self._lock:
            visible = [card for card in self._cards if card.name not in self._dismissed]
            self._cards = visible
        return self.publish(visible)
