"""Ownership checks applied where producers hand updates to the manager."""

from collections.abc import Set

import structlog

from contextual_cards.cards.errors import ProducerContractError
from contextual_cards.cards.models import CardType, CardUpdate
from contextual_cards.observability.metrics import CardMetrics
from contextual_cards.producers.base import UpdateChannel


logger = structlog.get_logger()


def validate_update(
    update: CardUpdate,
    owned_types: Set[CardType],
    producer_id: str | None = None,
) -> None:
    """Check that an update respects the producer's ownership contract.

    Args:
        update: Batches keyed by card type.
        owned_types: Types the producer owns.
        producer_id: Producer identifier for error reporting.

    Raises:
        ProducerContractError: If a key is not owned, a card is filed under
            the wrong key, or a name repeats within the update.
    """
    seen_names: set[str] = set()
    for card_type, batch in update.items():
        if card_type not in owned_types:
            msg = f"Producer does not own card type {card_type.value}"
            raise ProducerContractError(
                msg, source_id=producer_id, card_type=card_type.value
            )
        for card in batch:
            if card.card_type != card_type:
                msg = (
                    f"Card '{card.name}' of type {card.card_type.value} "
                    f"filed under {card_type.value}"
                )
                raise ProducerContractError(
                    msg,
                    source_id=producer_id,
                    card_type=card.card_type.value,
                    card_name=card.name,
                )
            if card.name in seen_names:
                msg = f"Duplicate card name '{card.name}' in update"
                raise ProducerContractError(
                    msg,
                    source_id=producer_id,
                    card_type=card_type.value,
                    card_name=card.name,
                )
            seen_names.add(card.name)


class ContractCheckedChannel:
    """Update channel that validates a single producer's updates.

    Wraps the shared channel handed to a producer on registration, so
    malformed batches are rejected before they reach reconciliation.
    """

    def __init__(
        self,
        target: UpdateChannel,
        producer_id: str,
        owned_types: Set[CardType],
        metrics: CardMetrics | None = None,
    ) -> None:
        """Initialize the channel.

        Args:
            target: Channel receiving valid updates.
            producer_id: Identifier of the producer being checked.
            owned_types: Types the producer owns.
            metrics: Optional metrics instance.
        """
        self._target = target
        self._producer_id = producer_id
        self._owned_types = frozenset(owned_types)
        self._metrics = metrics or CardMetrics.get_instance()
        self._log = logger.bind(component="producer_contract", producer_id=producer_id)

    @property
    def target(self) -> UpdateChannel:
        """Get the wrapped channel."""
        return self._target

    def on_contextual_card_updated(self, update: CardUpdate) -> None:
        """Validate and forward an update.

        Args:
            update: Batches keyed by card type.

        Raises:
            ProducerContractError: If the update breaks the contract.
        """
        try:
            validate_update(update, self._owned_types, self._producer_id)
        except ProducerContractError as e:
            self._metrics.record_contract_violation(self._producer_id)
            self._log.error("producer_contract_violation", **e.to_dict())
            raise
        self._target.on_contextual_card_updated(update)
