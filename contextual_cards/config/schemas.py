"""Card catalog configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from contextual_cards.cards.models import Card, CardType


class CatalogCardConfig(BaseModel):
    """Configuration for a single catalog card.

    Attributes:
        name: Card name, unique within the catalog.
        card_type: Card type; conditional types are not allowed here.
        ranking_score: Ranking score of the card.
        enabled: Whether the card is served.
        payload: Opaque display data.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Annotated[str, Field(min_length=1, max_length=200)]
    card_type: CardType = CardType.SLICE
    ranking_score: float = 0.0
    enabled: bool = True
    payload: dict[str, str] = Field(default_factory=dict)

    @field_validator("card_type")
    @classmethod
    def validate_external_type(cls, v: CardType) -> CardType:
        """Ensure catalogs only serve externally sourced types."""
        if v.is_conditional or v == CardType.DEFAULT:
            msg = f"Card type {v.value} cannot be served from a catalog"
            raise ValueError(msg)
        return v

    def to_card(self) -> Card:
        """Build the Card described by this entry."""
        return Card(
            card_type=self.card_type,
            name=self.name,
            ranking_score=self.ranking_score,
            payload=dict(self.payload),
        )


class CatalogSourceConfig(BaseModel):
    """A named group of catalog cards loaded as one card source.

    Attributes:
        id: Unique identifier for the source.
        enabled: Whether the source takes part in loads.
        cards: Cards served by the source.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1, max_length=100, pattern=r"^[a-z0-9_-]+$")]
    enabled: bool = True
    cards: list[CatalogCardConfig] = Field(default_factory=list)


class CardCatalogConfig(BaseModel):
    """Root configuration for a card catalog file.

    Attributes:
        version: Schema version.
        sources: Catalog sources.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    sources: list[CatalogSourceConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "CardCatalogConfig":
        """Ensure source IDs and card names are unique."""
        ids = [s.id for s in self.sources]
        duplicate_ids = {id_ for id_ in ids if ids.count(id_) > 1}
        if duplicate_ids:
            msg = f"Duplicate source IDs found: {sorted(duplicate_ids)}"
            raise ValueError(msg)

        names = [card.name for s in self.sources for card in s.cards]
        duplicate_names = {name for name in names if names.count(name) > 1}
        if duplicate_names:
            msg = f"Duplicate card names found: {sorted(duplicate_names)}"
            raise ValueError(msg)
        return self
