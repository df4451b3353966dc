"""Aggregate loading of externally sourced cards."""

from contextual_cards.loader.runner import (
    AggregateLoader,
    CardLoader,
    LoadCompletion,
    LoadResult,
    SourceLoadResult,
)
from contextual_cards.loader.sources import (
    CardSource,
    CatalogCardSource,
    StaticCardSource,
)


__all__ = [
    "AggregateLoader",
    "CardLoader",
    "CardSource",
    "CatalogCardSource",
    "LoadCompletion",
    "LoadResult",
    "SourceLoadResult",
    "StaticCardSource",
]
