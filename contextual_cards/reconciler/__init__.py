"""Reconciliation, ranking and stability filtering of card updates."""

from contextual_cards.reconciler.filters import FirstLaunchFilter, keep_displayed_cards
from contextual_cards.reconciler.ranking import sort_cards
from contextual_cards.reconciler.reconcile import (
    carry_over_cards,
    merge_cards,
    reconcile,
)


__all__ = [
    "FirstLaunchFilter",
    "carry_over_cards",
    "keep_displayed_cards",
    "merge_cards",
    "reconcile",
    "sort_cards",
]
