"""Merge partial producer updates into the authoritative card list.

A pass replaces every card whose type appears in the update and keeps
the others. An update with no keys at all is ambiguous about which
externally sourced types were queried, so only the conditional family
survives it.
"""

from collections.abc import Sequence, Set

from contextual_cards.cards.models import (
    CONDITIONAL_CARD_TYPES,
    Card,
    CardType,
    CardUpdate,
)
from contextual_cards.reconciler.ranking import sort_cards


def carry_over_cards(
    current: Sequence[Card],
    updated_types: Set[CardType],
) -> list[Card]:
    """Select the cards from the current list that survive an update.

    Args:
        current: Cards currently held, in display order.
        updated_types: Types present in the incoming update.

    Returns:
        Surviving cards, in their current order.
    """
    if not updated_types:
        return [card for card in current if card.card_type in CONDITIONAL_CARD_TYPES]
    return [card for card in current if card.card_type not in updated_types]


def merge_cards(current: Sequence[Card], update: CardUpdate) -> list[Card]:
    """Concatenate carried-over cards with the update's batches.

    Carry-over comes first, then each batch in mapping order with its
    internal order preserved. Duplicate names are not removed.

    Args:
        current: Cards currently held.
        update: New batches keyed by card type.

    Returns:
        Unsorted merged cards.
    """
    merged = carry_over_cards(current, set(update.keys()))
    for batch in update.values():
        merged.extend(batch)
    return merged


def reconcile(current: Sequence[Card], update: CardUpdate) -> list[Card]:
    """Run one reconciliation pass.

    Args:
        current: Cards currently held.
        update: New batches keyed by card type.

    Returns:
        The new card list in display order.
    """
    return sort_cards(merge_cards(current, update))
