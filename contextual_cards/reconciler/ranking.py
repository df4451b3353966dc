"""Deterministic card ordering."""

from collections.abc import Iterable
from operator import attrgetter

from contextual_cards.cards.models import Card


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    """Sort cards into display order.

    Order: ranking_score DESC. The sort is stable, so cards with equal
    scores keep their relative input order; name and type never break ties.

    Args:
        cards: Cards to order.

    Returns:
        New list in display order.
    """
    return sorted(cards, key=attrgetter("ranking_score"), reverse=True)
