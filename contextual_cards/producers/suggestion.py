"""Producer for legacy suggestion cards."""

from collections.abc import Callable, Sequence

from contextual_cards.cards.models import Card, CardType
from contextual_cards.producers.base import BaseCardProducer


SuggestionSource = Callable[[], Sequence[Card]]


def _no_suggestions() -> Sequence[Card]:
    return ()


class SuggestionCardProducer(BaseCardProducer):
    """Owns LEGACY_SUGGESTION cards pulled from a suggestion source."""

    card_types = frozenset({CardType.LEGACY_SUGGESTION})

    def __init__(
        self,
        source: SuggestionSource = _no_suggestions,
        producer_id: str | None = None,
    ) -> None:
        """Initialize the producer.

        Args:
            source: Callable returning the current suggestion cards.
            producer_id: Identifier for logs.
        """
        super().__init__(producer_id)
        self._source = source

    def refresh(self) -> None:
        """Pull suggestions from the source and publish them."""
        cards = list(self._source())
        self._log.info("suggestions_loaded", card_count=len(cards))
        self.publish(cards)
