"""Reconciles card batches from independent producers into one ranked list."""

from contextual_cards.cards import Card, CardType
from contextual_cards.manager import CardUpdateListener, ContextualCardManager


__all__ = [
    "Card",
    "CardType",
    "CardUpdateListener",
    "ContextualCardManager",
]
