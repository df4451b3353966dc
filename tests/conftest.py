"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest

from contextual_cards.observability.metrics import CardMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Reset the metrics singleton before and after each test."""
    CardMetrics.reset()
    yield
    CardMetrics.reset()
