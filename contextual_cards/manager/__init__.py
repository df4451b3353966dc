"""Card manager composition root."""

from contextual_cards.manager.dispatch import SerialDispatcher
from contextual_cards.manager.manager import (
    LOCAL_CARD_TYPES,
    CardUpdateListener,
    ContextualCardManager,
)


__all__ = [
    "LOCAL_CARD_TYPES",
    "CardUpdateListener",
    "ContextualCardManager",
    "SerialDispatcher",
]
