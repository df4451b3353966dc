"""Card producers and the registry that wires them to the manager."""

from contextual_cards.producers.base import BaseCardProducer, CardProducer, UpdateChannel
from contextual_cards.producers.conditional import Condition, ConditionalCardProducer
from contextual_cards.producers.contract import ContractCheckedChannel, validate_update
from contextual_cards.producers.lifecycle import Lifecycle, LifecycleObserver
from contextual_cards.producers.registry import (
    ProducerFactory,
    ProducerRegistry,
    default_producer_factories,
)
from contextual_cards.producers.slice import SliceCardProducer
from contextual_cards.producers.suggestion import SuggestionCardProducer


__all__ = [
    "BaseCardProducer",
    "CardProducer",
    "Condition",
    "ConditionalCardProducer",
    "ContractCheckedChannel",
    "Lifecycle",
    "LifecycleObserver",
    "ProducerFactory",
    "ProducerRegistry",
    "SliceCardProducer",
    "SuggestionCardProducer",
    "UpdateChannel",
    "default_producer_factories",
    "validate_update",
]
