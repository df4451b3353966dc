"""Card data model and error types."""

from contextual_cards.cards.errors import (
    CardError,
    CardErrorClass,
    CardSourceError,
    ErrorRecord,
    ProducerContractError,
)
from contextual_cards.cards.models import (
    CONDITIONAL_CARD_TYPES,
    Card,
    CardType,
    CardUpdate,
    find_duplicate_names,
    group_by_type,
)


__all__ = [
    "CONDITIONAL_CARD_TYPES",
    "Card",
    "CardError",
    "CardErrorClass",
    "CardSourceError",
    "CardType",
    "CardUpdate",
    "ErrorRecord",
    "ProducerContractError",
    "find_duplicate_names",
    "group_by_type",
]
