"""Card sources queried by the aggregate loader."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from contextual_cards.cards.models import Card
from contextual_cards.config.schemas import CardCatalogConfig, CatalogSourceConfig


@runtime_checkable
class CardSource(Protocol):
    """Protocol for externally sourced card providers.

    Sources are queried in parallel during an aggregate load; each returns
    the cards it currently considers eligible.
    """

    @property
    def source_id(self) -> str:
        """Unique identifier of the source."""
        ...

    @property
    def enabled(self) -> bool:
        """Whether the source takes part in loads."""
        ...

    def fetch(self) -> list[Card]:
        """Return the eligible cards of this source."""
        ...


class StaticCardSource:
    """Serves a fixed list of cards."""

    def __init__(
        self,
        source_id: str,
        cards: Sequence[Card],
        enabled: bool = True,
    ) -> None:
        self._source_id = source_id
        self._cards = list(cards)
        self._enabled = enabled

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def enabled(self) -> bool:
        return self._enabled

    def fetch(self) -> list[Card]:
        return list(self._cards)


class CatalogCardSource:
    """Serves the enabled cards of one catalog source."""

    def __init__(self, config: CatalogSourceConfig) -> None:
        self._config = config

    @classmethod
    def from_catalog(cls, catalog: CardCatalogConfig) -> list["CatalogCardSource"]:
        """Build one source per catalog entry.

        Args:
            catalog: Validated catalog.

        Returns:
            Sources in catalog order.
        """
        return [cls(source) for source in catalog.sources]

    @property
    def source_id(self) -> str:
        return self._config.id

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def fetch(self) -> list[Card]:
        return [card.to_card() for card in self._config.cards if card.enabled]
