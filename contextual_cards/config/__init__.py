"""Card catalog configuration."""

from contextual_cards.config.loader import CatalogLoader, ConfigValidationError
from contextual_cards.config.schemas import (
    CardCatalogConfig,
    CatalogCardConfig,
    CatalogSourceConfig,
)


__all__ = [
    "CardCatalogConfig",
    "CatalogCardConfig",
    "CatalogLoader",
    "CatalogSourceConfig",
    "ConfigValidationError",
]
