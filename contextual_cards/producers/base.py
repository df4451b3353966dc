"""Base producer interface and utilities."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from threading import Lock
from typing import ClassVar, Protocol, runtime_checkable

import structlog

from contextual_cards.cards.models import Card, CardType, CardUpdate


logger = structlog.get_logger()


@runtime_checkable
class UpdateChannel(Protocol):
    """Receiver of partial card updates keyed by card type."""

    def on_contextual_card_updated(self, update: CardUpdate) -> None:
        """Apply a partial update.

        Args:
            update: Batches keyed by card type.
        """
        ...


@runtime_checkable
class CardProducer(Protocol):
    """Protocol for card producers.

    Producers are responsible for:
    1. Owning a fixed set of card types
    2. Building fresh cards for those types
    3. Pushing them to the update channel whenever they change
    """

    card_types: ClassVar[frozenset[CardType]]

    @property
    def producer_id(self) -> str:
        """Stable identifier used in logs and errors."""
        ...

    def set_update_listener(self, listener: UpdateChannel) -> None:
        """Attach the channel that receives this producer's updates."""
        ...


class BaseCardProducer(ABC):
    """Abstract base class for producers.

    Provides update-channel wiring and batch assembly for all producers.
    """

    card_types: ClassVar[frozenset[CardType]] = frozenset()

    def __init__(self, producer_id: str | None = None) -> None:
        """Initialize the base producer.

        Args:
            producer_id: Identifier for logs; defaults to the class name.
        """
        self._producer_id = producer_id or type(self).__name__
        self._listener: UpdateChannel | None = None
        self._listener_lock = Lock()
        self._log = logger.bind(component="producer", producer_id=self._producer_id)

    @property
    def producer_id(self) -> str:
        """Get the producer identifier."""
        return self._producer_id

    @property
    def update_listener(self) -> UpdateChannel | None:
        """Get the attached update channel."""
        with self._listener_lock:
            return self._listener

    def set_update_listener(self, listener: UpdateChannel) -> None:
        """Attach the channel that receives this producer's updates.

        Args:
            listener: The update channel.
        """
        with self._listener_lock:
            self._listener = listener

    @abstractmethod
    def refresh(self) -> None:
        """Recompute this producer's cards and publish them."""

    def on_cards_displayed(self, cards: Sequence[Card]) -> None:  # noqa: B027
        """Hook called with the full card list after each applied pass.

        Args:
            cards: Published cards in display order.
        """

    def build_update(self, cards: Sequence[Card]) -> dict[CardType, list[Card]]:
        """Assemble an update covering every owned type.

        Owned types without cards get an explicit empty batch so that they
        are cleared rather than left to the empty-update policy.

        Args:
            cards: Cards to publish.

        Returns:
            Batches keyed by card type, owned types first in sorted order.
        """
        update: dict[CardType, list[Card]] = {
            card_type: [] for card_type in sorted(self.card_types, key=lambda t: t.value)
        }
        for card in cards:
            update.setdefault(card.card_type, []).append(card)
        return update

    def publish(self, cards: Sequence[Card]) -> bool:
        """Push a fresh set of cards to the update channel.

        Args:
            cards: All current cards of this producer.

        Returns:
            True if the update was delivered, False if no channel is attached.
        """
        listener = self.update_listener
        if listener is None:
            self._log.debug("publish_skipped_no_listener", card_count=len(cards))
            return False

        update = self.build_update(cards)
        self._log.debug(
            "cards_published",
            card_count=len(cards),
            card_types=[card_type.value for card_type in update],
        )
        listener.on_contextual_card_updated(update)
        return True
