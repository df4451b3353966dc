"""Unit tests for the aggregate card loader."""

import threading

import pytest

from contextual_cards.cards.errors import CardErrorClass, CardSourceError
from contextual_cards.cards.models import Card, CardType
from contextual_cards.loader.runner import CardLoader
from contextual_cards.loader.sources import StaticCardSource
from contextual_cards.observability.metrics import CardMetrics
from tests.helpers.cards import make_card, names


class FailingSource:
    """Source whose fetch raises the given exception."""

    def __init__(self, source_id: str, error: Exception) -> None:
        self.source_id = source_id
        self.enabled = True
        self._error = error

    def fetch(self) -> list[Card]:
        raise self._error


class InvalidCardSource:
    """Source that builds a card from malformed data."""

    source_id = "invalid"
    enabled = True

    def fetch(self) -> list[Card]:
        return [Card.model_validate({"card_type": "SLICE", "name": ""})]


class GatedSource:
    """Source that blocks until released, to force completion order."""

    def __init__(self, source_id: str, cards: list[Card], gate: threading.Event) -> None:
        self.source_id = source_id
        self.enabled = True
        self._cards = cards
        self._gate = gate

    def fetch(self) -> list[Card]:
        self._gate.wait(timeout=5)
        return self._cards


@pytest.fixture
def metrics() -> CardMetrics:
    return CardMetrics.get_instance()


class TestCardLoader:
    """Tests for CardLoader."""

    def test_cards_follow_source_order(self) -> None:
        """Cards are concatenated in declared source order."""
        loader = CardLoader(
            [
                StaticCardSource("first", [make_card("a"), make_card("b")]),
                StaticCardSource(
                    "second", [make_card("c", CardType.LEGACY_SUGGESTION)]
                ),
            ]
        )

        result = loader.run()

        assert names(result.cards) == ["a", "b", "c"]
        assert result.success
        assert result.total_cards == 3
        assert result.sources_succeeded == 2
        assert result.duration_ms >= 0

    def test_order_independent_of_completion_order(self) -> None:
        """A slow first source still comes first."""
        gate = threading.Event()
        slow = GatedSource("slow", [make_card("slow_card")], gate)
        fast = StaticCardSource("fast", [make_card("fast_card")])
        loader = CardLoader([slow, fast], max_workers=2)

        timer = threading.Timer(0.05, gate.set)
        timer.start()
        result = loader.run()
        timer.join()

        assert names(result.cards) == ["slow_card", "fast_card"]

    def test_sequential_mode(self) -> None:
        """A single worker queries sources in order."""
        loader = CardLoader(
            [StaticCardSource("one", [make_card("a")]), StaticCardSource("two", [])],
            max_workers=1,
        )

        result = loader.run()

        assert names(result.cards) == ["a"]
        assert set(result.source_results) == {"one", "two"}

    def test_disabled_source_skipped(self) -> None:
        """Disabled sources are not queried."""
        loader = CardLoader(
            [
                StaticCardSource("on", [make_card("a")]),
                StaticCardSource("off", [make_card("b")], enabled=False),
            ]
        )

        result = loader.run()

        assert names(result.cards) == ["a"]
        assert "off" not in result.source_results

    def test_source_error_isolated(self, metrics: CardMetrics) -> None:
        """A failing source does not stop the others."""
        loader = CardLoader(
            [
                FailingSource(
                    "broken",
                    CardSourceError(CardErrorClass.FETCH, "unreachable", "broken"),
                ),
                StaticCardSource("ok", [make_card("a")]),
            ],
            metrics=metrics,
        )

        result = loader.run()

        assert names(result.cards) == ["a"]
        assert not result.success
        assert result.sources_failed == 1
        error = result.source_results["broken"].error
        assert error is not None
        assert error.error_class == CardErrorClass.FETCH
        assert error.message == "unreachable"
        assert metrics.source_failures[("broken", "FETCH")] == 1

    def test_source_error_without_message_isolated(self) -> None:
        """A source error with an empty message is recorded like any other."""
        loader = CardLoader(
            [
                FailingSource("quiet", CardSourceError(CardErrorClass.FETCH, "", "quiet")),
                StaticCardSource("ok", [make_card("a")]),
            ]
        )

        result = loader.run()

        assert names(result.cards) == ["a"]
        assert result.sources_failed == 1
        error = result.source_results["quiet"].error
        assert error is not None
        assert error.error_class == CardErrorClass.FETCH
        assert error.message == "CardSourceError (FETCH)"

    def test_duplicate_source_ids_rejected(self) -> None:
        """Sources must have distinct IDs."""
        with pytest.raises(ValueError, match="Duplicate source IDs"):
            CardLoader(
                [
                    StaticCardSource("same", [make_card("a")]),
                    StaticCardSource("other", [make_card("b")]),
                    StaticCardSource("same", [make_card("c")]),
                ]
            )

    def test_unexpected_exception_is_fetch_error(self) -> None:
        """Arbitrary exceptions become FETCH errors."""
        loader = CardLoader([FailingSource("boom", RuntimeError("kaput"))])

        result = loader.run()

        error = result.source_results["boom"].error
        assert error is not None
        assert error.error_class == CardErrorClass.FETCH
        assert error.message == "Execution error: kaput"

    def test_invalid_card_data_is_schema_error(self) -> None:
        """Validation failures while building cards are SCHEMA errors."""
        loader = CardLoader([InvalidCardSource()])

        result = loader.run()

        error = result.source_results["invalid"].error
        assert error is not None
        assert error.error_class == CardErrorClass.SCHEMA
        assert error.message.startswith("Invalid card data: 1 errors")

    def test_load_invokes_completion_once(self) -> None:
        """load() hands the flat list to the callback exactly once."""
        received: list[list[Card]] = []
        loader = CardLoader([StaticCardSource("one", [make_card("a")])])

        result = loader.load(received.append)

        assert len(received) == 1
        assert names(received[0]) == ["a"]
        assert result.total_cards == 1

    def test_no_sources(self) -> None:
        """An empty loader completes with no cards."""
        received: list[list[Card]] = []
        CardLoader([]).load(received.append)
        assert received == [[]]
