"""Data models for contextual cards."""

from collections.abc import Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import Annotated, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CardType(str, Enum):
    """Category of a card.

    - DEFAULT: Synthetic key wrapping the full ordered list for listeners
    - SLICE: Externally sourced content card
    - LEGACY_SUGGESTION: Suggestion card owned by the host
    - CONDITIONAL: A single active device condition
    - CONDITIONAL_HEADER: Collapsed summary of several conditions
    - CONDITIONAL_FOOTER: Trailer shown under expanded conditions
    """

    DEFAULT = "DEFAULT"
    SLICE = "SLICE"
    LEGACY_SUGGESTION = "LEGACY_SUGGESTION"
    CONDITIONAL = "CONDITIONAL"
    CONDITIONAL_HEADER = "CONDITIONAL_HEADER"
    CONDITIONAL_FOOTER = "CONDITIONAL_FOOTER"

    @property
    def is_conditional(self) -> bool:
        """Check if this type belongs to the conditional family."""
        return self in CONDITIONAL_CARD_TYPES


# Locally-owned types trusted to persist across an empty update
CONDITIONAL_CARD_TYPES: frozenset[CardType] = frozenset(
    {
        CardType.CONDITIONAL,
        CardType.CONDITIONAL_HEADER,
        CardType.CONDITIONAL_FOOTER,
    }
)


class Card(BaseModel):
    """A discrete content item produced by exactly one producer.

    Cards are immutable and hashable; the payload is stored as a read-only
    mapping. A producer builds a fresh card for every pass and the previous
    one is discarded unless re-emitted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    card_type: CardType = Field(description="Card category")
    name: Annotated[str, Field(min_length=1, description="Stable card identity")]
    ranking_score: float = Field(
        default=0.0, description="Higher scores are shown first"
    )
    payload: Mapping[str, str] = Field(
        default_factory=dict, description="Opaque source-specific display data"
    )

    @field_validator("payload", mode="after")
    @classmethod
    def freeze_payload(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Store the payload as a read-only copy."""
        return MappingProxyType(dict(v))

    @field_serializer("payload")
    def serialize_payload(self, v: Mapping[str, str]) -> dict[str, str]:
        """Dump the payload as a plain dict."""
        return dict(v)

    def __hash__(self) -> int:
        return hash(
            (
                self.card_type,
                self.name,
                self.ranking_score,
                frozenset(self.payload.items()),
            )
        )


CardUpdate: TypeAlias = Mapping[CardType, Sequence[Card]]


def group_by_type(cards: Sequence[Card]) -> dict[CardType, list[Card]]:
    """Group cards by type.

    Keys appear in order of first appearance and each group keeps
    the relative order of its cards.

    Args:
        cards: Cards to group.

    Returns:
        Mapping of card type to cards of that type.
    """
    grouped: dict[CardType, list[Card]] = {}
    for card in cards:
        grouped.setdefault(card.card_type, []).append(card)
    return grouped


def find_duplicate_names(cards: Sequence[Card]) -> list[str]:
    """Find card names that occur more than once.

    Args:
        cards: Cards to inspect.

    Returns:
        Duplicated names, in order of their second occurrence.
    """
    seen: set[str] = set()
    duplicates: list[str] = []
    for card in cards:
        if card.name in seen and card.name not in duplicates:
            duplicates.append(card.name)
        seen.add(card.name)
    return duplicates
