"""Composition root that owns the authoritative card list."""

import time
from collections.abc import Callable, Mapping, Sequence
from functools import partial
from typing import Protocol, runtime_checkable

import structlog

from contextual_cards.cards.models import Card, CardType, CardUpdate, group_by_type
from contextual_cards.loader.runner import AggregateLoader, CardLoader
from contextual_cards.manager.dispatch import SerialDispatcher
from contextual_cards.observability.logging import bind_load_context, clear_load_context
from contextual_cards.observability.metrics import CardMetrics
from contextual_cards.producers.lifecycle import Lifecycle
from contextual_cards.producers.registry import ProducerFactory, ProducerRegistry
from contextual_cards.reconciler.filters import FirstLaunchFilter, keep_displayed_cards
from contextual_cards.reconciler.reconcile import reconcile
from contextual_cards.session.guard import LoadSession, LoadSessionGuard
from contextual_cards.settings.app import CardSettings, get_settings


logger = structlog.get_logger()


# Types produced by the host itself, wired up before any load
LOCAL_CARD_TYPES: tuple[CardType, ...] = (
    CardType.CONDITIONAL,
    CardType.LEGACY_SUGGESTION,
)


@runtime_checkable
class CardUpdateListener(Protocol):
    """Consumer of the merged card list."""

    def on_cards_updated(self, cards: Mapping[CardType, Sequence[Card]]) -> None:
        """Receive the full ordered list under the DEFAULT key.

        Args:
            cards: Single-entry mapping of DEFAULT to the ordered cards.
        """
        ...


class ContextualCardManager:
    """Aggregates producer updates into one ordered card list.

    The manager is the only writer of the card list. Every update, whether
    pushed by a producer or delivered by an aggregate load, is queued on a
    serial dispatcher and applied as one atomic pass:

        reconcile -> (load filters) -> replace
        -> wire producers for resulting types -> notify listener

    Load completions additionally pass the session guard first; rejected
    completions are dropped without touching the list or the listener.
    Only the first accepted load is restricted to the saved card names, so
    producer pushes that arrive earlier (for example conditions evaluated
    when the host starts) neither consume nor suffer the first-launch pass.
    """

    def __init__(  # noqa: PLR0913
        self,
        loader: AggregateLoader | None = None,
        factories: Mapping[CardType, ProducerFactory] | None = None,
        lifecycle: Lifecycle | None = None,
        saved_card_names: Sequence[str] | None = None,
        settings: CardSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: CardMetrics | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            loader: Aggregate loader used by load_cards().
            factories: Type-to-producer-factory table.
            lifecycle: Host lifecycle producers may observe.
            saved_card_names: Names shown before a restart, if persisted.
            settings: Manager settings; read from the environment if omitted.
            clock: Monotonic clock in seconds for load timing.
            metrics: Optional metrics instance.
        """
        self._settings = settings or get_settings()
        self._metrics = metrics or CardMetrics.get_instance()
        self._cards: tuple[Card, ...] = ()
        self._listener: CardUpdateListener | None = None
        self._dispatcher = SerialDispatcher()
        self._guard = LoadSessionGuard(
            timeout_ms=self._settings.load_timeout_ms,
            clock=clock,
        )
        self._first_launch_filter = FirstLaunchFilter(saved_card_names)
        self._loader = loader or CardLoader(
            [],
            max_workers=self._settings.loader_max_workers,
            metrics=self._metrics,
        )
        self._registry = ProducerRegistry(
            update_channel=self,
            factories=factories,
            lifecycle=lifecycle,
            validate_updates=self._settings.validate_producer_updates,
            metrics=self._metrics,
        )
        self._log = logger.bind(component="card_manager")

        for card_type in LOCAL_CARD_TYPES:
            self._registry.get_producer(card_type)

    @property
    def cards(self) -> tuple[Card, ...]:
        """Get a snapshot of the current ordered card list."""
        return self._cards

    @property
    def producer_registry(self) -> ProducerRegistry:
        """Get the producer registry."""
        return self._registry

    @property
    def session_guard(self) -> LoadSessionGuard:
        """Get the load-session guard."""
        return self._guard

    @property
    def is_first_launch(self) -> bool:
        """Check if no load has been accepted since construction."""
        return self._first_launch_filter.is_first_launch

    def get_producer_registry(self) -> ProducerRegistry:
        """Get the producer registry."""
        return self._registry

    def set_listener(self, listener: CardUpdateListener | None) -> None:
        """Attach the consumer of merged card lists.

        Args:
            listener: The listener, or None to detach.
        """
        self._listener = listener

    def load_cards(self) -> LoadSession:
        """Start an aggregate load.

        Begins a new load session (superseding any in flight) and asks the
        loader for all eligible cards. The completion is routed back to
        on_batch_completed() with the session handle attached.

        Returns:
            The session handle for this load.
        """
        session = self._guard.begin_session()
        self._log.info("load_requested", session_id=session.session_id)

        bind_load_context(session.session_id)
        try:
            self._loader.load(partial(self.on_batch_completed, session=session))
        finally:
            clear_load_context()
        return session

    def on_batch_completed(
        self,
        cards: Sequence[Card],
        session: LoadSession | None = None,
    ) -> None:
        """Handle the completion of an aggregate load.

        Args:
            cards: All loaded cards; an empty list means no external cards.
            session: Handle of the completed session; None means the
                currently active one.
        """
        update = group_by_type(cards)
        self._dispatcher.submit(partial(self._apply_load_completion, update, session))

    def on_contextual_card_updated(self, update: CardUpdate) -> None:
        """Handle a partial update pushed by a producer.

        Args:
            update: Batches keyed by card type.
        """
        snapshot = {card_type: list(batch) for card_type, batch in update.items()}
        self._dispatcher.submit(partial(self._apply_update, snapshot, False))

    def _apply_load_completion(
        self,
        update: dict[CardType, list[Card]],
        session: LoadSession | None,
    ) -> None:
        decision = self._guard.decide(session)
        if not decision.accepted:
            reason = decision.reason.value if decision.reason else "unknown"
            self._metrics.record_session_discarded(reason)
            return

        self._metrics.record_session_accepted(decision.elapsed_ms or 0.0)
        self._apply_update(update, True)

    def _apply_update(self, update: dict[CardType, list[Card]], from_load: bool) -> None:
        """Apply one reconciliation pass. Runs on the dispatcher only."""
        previous = self._cards
        first_launch = self._first_launch_filter.is_first_launch

        cards = reconcile(previous, update)
        if from_load:
            cards = self._first_launch_filter.apply(cards)
            if not first_launch and self._settings.stable_reload and previous:
                cards = keep_displayed_cards(cards, previous)

        self._cards = tuple(cards)
        self._metrics.record_reconciliation(len(self._cards))
        self._log.info(
            "reconciliation_complete",
            updated_types=[card_type.value for card_type in update],
            cards_in=len(previous),
            cards_out=len(self._cards),
            from_load=from_load,
            first_launch=first_launch,
        )

        self._load_card_producers()

        listener = self._listener
        if listener is not None:
            listener.on_cards_updated({CardType.DEFAULT: list(self._cards)})

    def _load_card_producers(self) -> None:
        """Make sure every displayed type has a wired producer."""
        for card_type in dict.fromkeys(card.card_type for card in self._cards):
            self._registry.get_producer(card_type)

        for producer in self._registry.producers():
            producer.on_cards_displayed(self._cards)
