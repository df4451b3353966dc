"""Metrics collection for card reconciliation."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock


# Module-level singleton state
_metrics_instance: "CardMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class CardMetrics:
    """Thread-safe metrics for the card manager.

    Tracks reconciliation passes, load sessions, and producer problems.
    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Reconciliation passes applied
    reconciliations_total: int = 0

    # Cards in the most recently published list
    cards_published: int = 0

    # Load sessions accepted
    sessions_accepted: int = 0

    # Load sessions discarded by reason
    sessions_discarded: Counter[str] = field(default_factory=Counter)

    # Lookups for types with no configured producer
    producers_missing: Counter[str] = field(default_factory=Counter)

    # Producer contract violations by producer
    contract_violations: Counter[str] = field(default_factory=Counter)

    # Card source failures by source and error class
    source_failures: Counter[tuple[str, str]] = field(default_factory=Counter)

    # Duration of the most recent load in milliseconds
    last_load_duration_ms: float | None = None

    @classmethod
    def get_instance(cls) -> "CardMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared CardMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_reconciliation(self, card_count: int) -> None:
        """Record an applied reconciliation pass.

        Args:
            card_count: Size of the resulting card list.
        """
        with self._lock:
            self.reconciliations_total += 1
            self.cards_published = card_count

    def record_session_accepted(self, duration_ms: float) -> None:
        """Record an accepted load session.

        Args:
            duration_ms: Time from session start to completion.
        """
        with self._lock:
            self.sessions_accepted += 1
            self.last_load_duration_ms = duration_ms

    def record_session_discarded(self, reason: str) -> None:
        """Record a discarded load session.

        Args:
            reason: Why the completion was discarded.
        """
        with self._lock:
            self.sessions_discarded[reason] += 1

    def record_producer_missing(self, card_type: str) -> None:
        """Record a lookup for a type without a producer.

        Args:
            card_type: The unresolved card type.
        """
        with self._lock:
            self.producers_missing[card_type] += 1

    def record_contract_violation(self, producer_id: str) -> None:
        """Record a rejected producer update.

        Args:
            producer_id: Identifier of the offending producer.
        """
        with self._lock:
            self.contract_violations[producer_id] += 1

    def record_source_failure(self, source_id: str, error_class: str) -> None:
        """Record a card source failure during a load.

        Args:
            source_id: Identifier of the failed source.
            error_class: Classification of the failure.
        """
        with self._lock:
            self.source_failures[(source_id, error_class)] += 1

    def get_discarded_total(self) -> int:
        """Get total discarded sessions across all reasons.

        Returns:
            Discarded session count.
        """
        with self._lock:
            return sum(self.sessions_discarded.values())

    def to_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string.
        """
        lines: list[str] = []

        with self._lock:
            lines.append(
                "# HELP cards_reconciliations_total Reconciliation passes applied"
            )
            lines.append("# TYPE cards_reconciliations_total counter")
            lines.append(f"cards_reconciliations_total {self.reconciliations_total}")

            lines.append("# HELP cards_published Cards in the last published list")
            lines.append("# TYPE cards_published gauge")
            lines.append(f"cards_published {self.cards_published}")

            lines.append("# HELP cards_sessions_accepted_total Accepted load sessions")
            lines.append("# TYPE cards_sessions_accepted_total counter")
            lines.append(f"cards_sessions_accepted_total {self.sessions_accepted}")

            lines.append(
                "# HELP cards_sessions_discarded_total Discarded load sessions by reason"
            )
            lines.append("# TYPE cards_sessions_discarded_total counter")
            for reason, count in sorted(self.sessions_discarded.items()):
                lines.append(
                    f'cards_sessions_discarded_total{{reason="{reason}"}} {count}'
                )

            lines.append(
                "# HELP cards_producers_missing_total Lookups without a producer"
            )
            lines.append("# TYPE cards_producers_missing_total counter")
            for card_type, count in sorted(self.producers_missing.items()):
                lines.append(
                    f'cards_producers_missing_total{{card_type="{card_type}"}} {count}'
                )

            lines.append(
                "# HELP cards_contract_violations_total Rejected producer updates"
            )
            lines.append("# TYPE cards_contract_violations_total counter")
            for producer_id, count in sorted(self.contract_violations.items()):
                lines.append(
                    f'cards_contract_violations_total{{producer_id="{producer_id}"}} {count}'
                )

            lines.append(
                "# HELP cards_source_failures_total Source failures by error class"
            )
            lines.append("# TYPE cards_source_failures_total counter")
            for (source_id, error_class), count in sorted(
                self.source_failures.items()
            ):
                lines.append(
                    f'cards_source_failures_total{{source_id="{source_id}",error_class="{error_class}"}} {count}'
                )

            if self.last_load_duration_ms is not None:
                lines.append("# HELP cards_load_duration_ms Duration of the last load")
                lines.append("# TYPE cards_load_duration_ms gauge")
                lines.append(f"cards_load_duration_ms {self.last_load_duration_ms:.2f}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Export metrics as dictionary.

        Source failures are nested by source id, then error class, so the
        result is JSON-serializable.

        Returns:
            Dictionary representation of all metrics.
        """
        with self._lock:
            source_failures: dict[str, dict[str, int]] = {}
            for (source_id, error_class), count in sorted(
                self.source_failures.items()
            ):
                source_failures.setdefault(source_id, {})[error_class] = count

            return {
                "reconciliations_total": self.reconciliations_total,
                "cards_published": self.cards_published,
                "sessions_accepted": self.sessions_accepted,
                "sessions_discarded": dict(self.sessions_discarded),
                "producers_missing": dict(self.producers_missing),
                "contract_violations": dict(self.contract_violations),
                "source_failures": source_failures,
                "last_load_duration_ms": self.last_load_duration_ms,
            }
