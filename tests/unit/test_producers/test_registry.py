"""Unit tests for the producer registry."""

from functools import partial

import pytest

from contextual_cards.cards.errors import ProducerContractError
from contextual_cards.cards.models import CONDITIONAL_CARD_TYPES, CardType
from contextual_cards.observability.metrics import CardMetrics
from contextual_cards.producers.conditional import ConditionalCardProducer
from contextual_cards.producers.contract import ContractCheckedChannel
from contextual_cards.producers.lifecycle import Lifecycle
from contextual_cards.producers.registry import (
    ProducerRegistry,
    default_producer_factories,
)
from contextual_cards.producers.slice import SliceCardProducer
from contextual_cards.producers.suggestion import SuggestionCardProducer
from tests.helpers.cards import RecordingChannel, make_card


class TestDefaultFactories:
    """Tests for default_producer_factories."""

    def test_covers_all_producer_types(self) -> None:
        """Every non-DEFAULT type has a factory."""
        factories = default_producer_factories()
        assert set(factories) == set(CardType) - {CardType.DEFAULT}

    def test_conditional_family_shares_factory(self) -> None:
        """The three conditional types map to one factory object."""
        factories = default_producer_factories()
        shared = {id(factories[card_type]) for card_type in CONDITIONAL_CARD_TYPES}
        assert len(shared) == 1


class TestProducerRegistry:
    """Tests for ProducerRegistry."""

    def test_conditional_family_resolves_to_one_instance(self) -> None:
        """Header, footer and conditional share one producer."""
        registry = ProducerRegistry(RecordingChannel())

        producers = {
            id(registry.get_producer(card_type)) for card_type in CONDITIONAL_CARD_TYPES
        }

        assert len(producers) == 1
        assert registry.count() == 1
        assert isinstance(
            registry.get_producer(CardType.CONDITIONAL), ConditionalCardProducer
        )

    def test_memoized_per_type(self) -> None:
        """Repeated lookups return the same producer."""
        registry = ProducerRegistry(RecordingChannel())

        first = registry.get_producer(CardType.SLICE)
        second = registry.get_producer(CardType.SLICE)

        assert first is second
        assert isinstance(first, SliceCardProducer)

    def test_missing_factory_returns_none(self) -> None:
        """Types without a producer are skipped and counted."""
        metrics = CardMetrics.get_instance()
        registry = ProducerRegistry(RecordingChannel(), factories={}, metrics=metrics)

        assert registry.get_producer(CardType.SLICE) is None
        assert registry.get_producer(CardType.DEFAULT) is None
        assert metrics.producers_missing == {"SLICE": 1, "DEFAULT": 1}
        assert registry.count() == 0

    def test_producer_wired_to_checked_channel(self) -> None:
        """Producers publish through the ownership check."""
        channel = RecordingChannel()
        registry = ProducerRegistry(channel)

        producer = registry.get_producer(CardType.SLICE)

        assert producer is not None
        listener = producer.update_listener
        assert isinstance(listener, ContractCheckedChannel)
        assert listener.target is channel

    def test_validation_can_be_disabled(self) -> None:
        """With validation off the raw channel is attached."""
        channel = RecordingChannel()
        registry = ProducerRegistry(channel, validate_updates=False)

        producer = registry.get_producer(CardType.SLICE)

        assert producer is not None
        assert producer.update_listener is channel

    def test_factory_building_wrong_type_rejected(self) -> None:
        """A factory must build a producer that owns the type."""
        registry = ProducerRegistry(
            RecordingChannel(),
            factories={CardType.SLICE: partial(SuggestionCardProducer)},
        )

        with pytest.raises(ProducerContractError):
            registry.get_producer(CardType.SLICE)

    def test_lifecycle_subscription_once(self) -> None:
        """Observing producers subscribe exactly once."""
        lifecycle = Lifecycle()
        registry = ProducerRegistry(RecordingChannel(), lifecycle=lifecycle)

        registry.get_producer(CardType.CONDITIONAL)
        registry.get_producer(CardType.CONDITIONAL_HEADER)
        registry.get_producer(CardType.SLICE)

        observers = lifecycle.observers()
        assert len(observers) == 1
        assert isinstance(observers[0], ConditionalCardProducer)

    def test_started_lifecycle_publishes_on_registration(self) -> None:
        """A producer registered while started evaluates immediately."""
        channel = RecordingChannel()
        lifecycle = Lifecycle()
        lifecycle.start()
        registry = ProducerRegistry(channel, lifecycle=lifecycle)

        registry.get_producer(CardType.CONDITIONAL)

        assert len(channel.updates) == 1
        assert set(channel.updates[0]) == set(CONDITIONAL_CARD_TYPES)

    def test_registered_types(self) -> None:
        """Types are reported once their producer exists."""
        registry = ProducerRegistry(RecordingChannel())
        assert not registry.is_registered(CardType.SLICE)

        registry.get_producer(CardType.CONDITIONAL)

        assert set(registry.registered_types()) == set(CONDITIONAL_CARD_TYPES)
        assert registry.is_registered(CardType.CONDITIONAL_FOOTER)
        assert not registry.is_registered(CardType.SLICE)

    def test_custom_factory_used(self) -> None:
        """Injected factories replace the defaults."""
        suggestions = [make_card("tip", CardType.LEGACY_SUGGESTION)]
        channel = RecordingChannel()
        registry = ProducerRegistry(
            channel,
            factories={
                CardType.LEGACY_SUGGESTION: partial(
                    SuggestionCardProducer, source=lambda: suggestions
                )
            },
        )

        producer = registry.get_producer(CardType.LEGACY_SUGGESTION)
        assert producer is not None
        producer.refresh()

        assert channel.updates == [{CardType.LEGACY_SUGGESTION: suggestions}]
        assert registry.producers() == [producer]
