"""Observability module for logging and metrics."""

from contextual_cards.observability.logging import (
    bind_load_context,
    clear_load_context,
    configure_logging,
    get_logger,
)
from contextual_cards.observability.metrics import CardMetrics


__all__ = [
    "CardMetrics",
    "bind_load_context",
    "clear_load_context",
    "configure_logging",
    "get_logger",
]
