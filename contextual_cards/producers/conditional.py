"""Producer for locally-evaluated condition cards."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from threading import Lock

from contextual_cards.cards.models import CONDITIONAL_CARD_TYPES, Card, CardType
from contextual_cards.producers.base import BaseCardProducer


CONDITION_HEADER_NAME = "condition_header"
CONDITION_FOOTER_NAME = "condition_footer"


@dataclass(frozen=True)
class Condition:
    """A device condition that yields a card while active.

    Attributes:
        name: Card name used while the condition is active.
        is_active: Callable polled on every refresh.
        ranking_score: Score of the resulting card.
        payload: Display data copied onto the card.
    """

    name: str
    is_active: Callable[[], bool]
    ranking_score: float = 0.0
    payload: Mapping[str, str] = field(default_factory=dict)

    def to_card(self) -> Card:
        """Build the CONDITIONAL card for this condition."""
        return Card(
            card_type=CardType.CONDITIONAL,
            name=self.name,
            ranking_score=self.ranking_score,
            payload=dict(self.payload),
        )


class ConditionalCardProducer(BaseCardProducer):
    """Owns the conditional family and re-evaluates conditions on start.

    A single active condition is always a plain CONDITIONAL card. With
    several active conditions the collapsed view is one CONDITIONAL_HEADER
    summary card; the expanded view lists each condition followed by a
    CONDITIONAL_FOOTER.
    """

    card_types = CONDITIONAL_CARD_TYPES

    def __init__(
        self,
        conditions: Sequence[Condition] = (),
        expanded: bool = False,
        producer_id: str | None = None,
    ) -> None:
        """Initialize the producer.

        Args:
            conditions: Conditions to evaluate.
            expanded: Whether several conditions are listed individually.
            producer_id: Identifier for logs.
        """
        super().__init__(producer_id)
        self._conditions = list(conditions)
        self._expanded = expanded
        self._started = False
        self._lock = Lock()

    @property
    def is_started(self) -> bool:
        """Check if the host lifecycle is started."""
        with self._lock:
            return self._started

    @property
    def expanded(self) -> bool:
        """Check if conditions are listed individually."""
        with self._lock:
            return self._expanded

    def on_start(self) -> None:
        """Re-evaluate conditions when the host starts."""
        with self._lock:
            self._started = True
        self.refresh()

    def on_stop(self) -> None:
        """Stop reacting to condition changes."""
        with self._lock:
            self._started = False

    def set_expanded(self, expanded: bool) -> None:
        """Switch between collapsed and expanded views and republish.

        Args:
            expanded: Whether to list conditions individually.
        """
        with self._lock:
            changed = self._expanded != expanded
            self._expanded = expanded
        if changed:
            self.refresh()

    def set_conditions(self, conditions: Sequence[Condition]) -> None:
        """Replace the evaluated conditions and republish.

        Args:
            conditions: New conditions.
        """
        with self._lock:
            self._conditions = list(conditions)
        self.refresh()

    def build_cards(self) -> list[Card]:
        """Evaluate conditions and build the cards to show.

        Returns:
            Cards for the current view, in display order.
        """
        with self._lock:
            conditions = list(self._conditions)
            expanded = self._expanded

        active = [condition for condition in conditions if condition.is_active()]
        if not active:
            return []
        if len(active) == 1:
            return [active[0].to_card()]

        scores = [condition.ranking_score for condition in active]
        if not expanded:
            return [
                Card(
                    card_type=CardType.CONDITIONAL_HEADER,
                    name=CONDITION_HEADER_NAME,
                    ranking_score=max(scores),
                    payload={
                        "condition_count": str(len(active)),
                        "conditions": ",".join(condition.name for condition in active),
                    },
                )
            ]

        cards = [condition.to_card() for condition in active]
        # Lowest score keeps the footer under the expanded list after sorting
        cards.append(
            Card(
                card_type=CardType.CONDITIONAL_FOOTER,
                name=CONDITION_FOOTER_NAME,
                ranking_score=min(scores),
            )
        )
        return cards

    def refresh(self) -> None:
        """Evaluate conditions and publish the resulting cards."""
        cards = self.build_cards()
        self._log.info("conditions_evaluated", card_count=len(cards))
        self.publish(cards)
