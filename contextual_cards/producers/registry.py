"""Registry resolving card types to their producers."""

from collections.abc import Callable, Mapping
from functools import partial
from threading import Lock

import structlog

from contextual_cards.cards.errors import ProducerContractError
from contextual_cards.cards.models import CONDITIONAL_CARD_TYPES, CardType
from contextual_cards.observability.metrics import CardMetrics
from contextual_cards.producers.base import BaseCardProducer, UpdateChannel
from contextual_cards.producers.conditional import ConditionalCardProducer
from contextual_cards.producers.contract import ContractCheckedChannel
from contextual_cards.producers.lifecycle import Lifecycle, LifecycleObserver
from contextual_cards.producers.slice import SliceCardProducer
from contextual_cards.producers.suggestion import SuggestionCardProducer


logger = structlog.get_logger()


ProducerFactory = Callable[[], BaseCardProducer]


def default_producer_factories() -> dict[CardType, ProducerFactory]:
    """Build the standard type-to-factory table.

    The conditional family shares a single factory object so that all
    three types resolve to one producer instance.

    Returns:
        Mapping of card type to producer factory.
    """
    conditional = partial(ConditionalCardProducer)
    factories: dict[CardType, ProducerFactory] = {
        card_type: conditional for card_type in CONDITIONAL_CARD_TYPES
    }
    factories[CardType.LEGACY_SUGGESTION] = partial(SuggestionCardProducer)
    factories[CardType.SLICE] = partial(SliceCardProducer)
    return factories


class ProducerRegistry:
    """Thread-safe registry that lazily builds and wires producers.

    Producers are memoized per factory, attached to the shared update
    channel once on creation, and subscribed to the host lifecycle once
    if they observe it. Types without a factory are logged and skipped.
    """

    def __init__(
        self,
        update_channel: UpdateChannel,
        factories: Mapping[CardType, ProducerFactory] | None = None,
        lifecycle: Lifecycle | None = None,
        validate_updates: bool = True,
        metrics: CardMetrics | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            update_channel: Channel every producer publishes to.
            factories: Type-to-factory table; defaults to the standard one.
            lifecycle: Host lifecycle for observing producers.
            validate_updates: Whether producer updates are checked for
                ownership before reaching the channel.
            metrics: Optional metrics instance.
        """
        self._update_channel = update_channel
        self._factories = dict(
            factories if factories is not None else default_producer_factories()
        )
        self._lifecycle = lifecycle
        self._validate_updates = validate_updates
        self._metrics = metrics or CardMetrics.get_instance()
        self._producers: dict[ProducerFactory, BaseCardProducer] = {}
        self._observed: list[BaseCardProducer] = []
        self._lock = Lock()
        self._log = logger.bind(component="producer_registry")

    def get_producer(self, card_type: CardType) -> BaseCardProducer | None:
        """Get the producer for a card type, building it on first request.

        Args:
            card_type: The card type to resolve.

        Returns:
            The producer, or None if no producer is configured for the type.

        Raises:
            ProducerContractError: If the factory builds a producer that
                does not own the requested type.
        """
        with self._lock:
            factory = self._factories.get(card_type)
            if factory is None:
                self._metrics.record_producer_missing(card_type.value)
                self._log.warning("producer_not_found", card_type=card_type.value)
                return None

            producer = self._producers.get(factory)
            if producer is None:
                producer = self._create(factory, card_type)
                self._producers[factory] = producer

            subscribe = (
                self._lifecycle is not None
                and isinstance(producer, LifecycleObserver)
                and not any(existing is producer for existing in self._observed)
            )
            if subscribe:
                self._observed.append(producer)

        # Outside the lock: a started lifecycle calls on_start() right away
        if subscribe and self._lifecycle is not None:
            self._lifecycle.add_observer(producer)  # type: ignore[arg-type]
            self._log.info(
                "producer_observing_lifecycle",
                producer_id=producer.producer_id,
            )
        return producer

    def _create(self, factory: ProducerFactory, card_type: CardType) -> BaseCardProducer:
        """Build and wire a producer. Caller must hold the lock."""
        producer = factory()
        if card_type not in producer.card_types:
            msg = f"Factory for {card_type.value} built a producer that does not own it"
            raise ProducerContractError(
                msg, source_id=producer.producer_id, card_type=card_type.value
            )

        channel: UpdateChannel = self._update_channel
        if self._validate_updates:
            channel = ContractCheckedChannel(
                self._update_channel,
                producer.producer_id,
                producer.card_types,
                metrics=self._metrics,
            )
        producer.set_update_listener(channel)

        self._log.info(
            "producer_registered",
            producer_id=producer.producer_id,
            card_types=sorted(t.value for t in producer.card_types),
        )
        return producer

    def is_registered(self, card_type: CardType) -> bool:
        """Check if the producer for a type has been built.

        Args:
            card_type: The card type to check.

        Returns:
            True if a producer for the type exists.
        """
        with self._lock:
            factory = self._factories.get(card_type)
            return factory is not None and factory in self._producers

    def registered_types(self) -> list[CardType]:
        """List card types whose producer has been built."""
        with self._lock:
            return [
                card_type
                for card_type, factory in self._factories.items()
                if factory in self._producers
            ]

    def producers(self) -> list[BaseCardProducer]:
        """List built producers in creation order."""
        with self._lock:
            return list(self._producers.values())

    def count(self) -> int:
        """Get the number of built producers."""
        with self._lock:
            return len(self._producers)
