"""Aggregate card loader with parallel execution and failure isolation."""

import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

import structlog
from pydantic import ValidationError

from contextual_cards.cards.errors import CardErrorClass, CardSourceError, ErrorRecord
from contextual_cards.cards.models import Card
from contextual_cards.loader.sources import CardSource
from contextual_cards.observability.metrics import CardMetrics


logger = structlog.get_logger()


LoadCompletion = Callable[[list[Card]], None]


class AggregateLoader(Protocol):
    """Collaborator that fetches all eligible cards for one load."""

    def load(self, on_complete: LoadCompletion) -> object:
        """Fetch cards and hand them to on_complete exactly once.

        Args:
            on_complete: Completion callback receiving the flat card list.
        """
        ...


@dataclass
class SourceLoadResult:
    """Result of loading a single card source."""

    source_id: str
    cards: list[Card] = field(default_factory=list)
    error: ErrorRecord | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        """Check if the source loaded without error."""
        return self.error is None


@dataclass
class LoadResult:
    """Result of a complete aggregate load."""

    started_at: datetime
    finished_at: datetime
    source_results: dict[str, SourceLoadResult]
    cards: list[Card] = field(default_factory=list)
    sources_succeeded: int = 0
    sources_failed: int = 0

    @property
    def success(self) -> bool:
        """Check if no source failed."""
        return self.sources_failed == 0

    @property
    def total_cards(self) -> int:
        """Get the number of loaded cards."""
        return len(self.cards)

    @property
    def duration_ms(self) -> float:
        """Get total duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000


class CardLoader:
    """Loads cards from multiple sources with parallel execution.

    Provides:
    - Parallel source queries with configurable concurrency
    - Failure isolation (one source failing doesn't stop others)
    - Deterministic output: cards follow the declared source order
    - Structured logging and metrics
    """

    def __init__(
        self,
        sources: Sequence[CardSource],
        max_workers: int = 4,
        metrics: CardMetrics | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            sources: Card sources to query.
            max_workers: Maximum parallel workers.
            metrics: Optional metrics instance.

        Raises:
            ValueError: If two sources share a source ID.
        """
        self._sources = list(sources)
        ids = [source.source_id for source in self._sources]
        duplicate_ids = {id_ for id_ in ids if ids.count(id_) > 1}
        if duplicate_ids:
            msg = f"Duplicate source IDs: {sorted(duplicate_ids)}"
            raise ValueError(msg)

        self._max_workers = max_workers
        self._metrics = metrics or CardMetrics.get_instance()
        self._log = logger.bind(component="card_loader")

    @property
    def sources(self) -> list[CardSource]:
        """Get the configured sources."""
        return list(self._sources)

    def load(self, on_complete: LoadCompletion) -> LoadResult:
        """Run a load and deliver the cards to the completion callback.

        Args:
            on_complete: Callback receiving the flat card list.

        Returns:
            LoadResult with per-source details.
        """
        result = self.run()
        on_complete(list(result.cards))
        return result

    def run(self) -> LoadResult:
        """Query all enabled sources.

        Returns:
            LoadResult with aggregated cards.
        """
        started_at = datetime.now(UTC)

        active_sources = [s for s in self._sources if s.enabled]
        self._log.info(
            "load_started",
            source_count=len(self._sources),
            active_count=len(active_sources),
            max_workers=self._max_workers,
        )

        source_results: dict[str, SourceLoadResult] = {}

        if self._max_workers <= 1:
            for source in active_sources:
                source_results[source.source_id] = self._load_single_source(source)
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                future_to_source = {
                    executor.submit(self._load_single_source, source): source
                    for source in active_sources
                }

                for future in as_completed(future_to_source):
                    source = future_to_source[future]
                    source_results[source.source_id] = future.result()

        cards = [
            card
            for source in active_sources
            for card in source_results[source.source_id].cards
        ]

        finished_at = datetime.now(UTC)
        sources_succeeded = sum(1 for r in source_results.values() if r.success)
        sources_failed = len(source_results) - sources_succeeded

        self._log.info(
            "load_complete",
            duration_ms=round((finished_at - started_at).total_seconds() * 1000, 2),
            total_cards=len(cards),
            sources_succeeded=sources_succeeded,
            sources_failed=sources_failed,
        )

        return LoadResult(
            started_at=started_at,
            finished_at=finished_at,
            source_results=source_results,
            cards=cards,
            sources_succeeded=sources_succeeded,
            sources_failed=sources_failed,
        )

    def _load_single_source(self, source: CardSource) -> SourceLoadResult:
        """Query a single source, isolating any failure.

        Args:
            source: Card source.

        Returns:
            SourceLoadResult with cards or an error record.
        """
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(source_id=source.source_id)

        error: ErrorRecord | None = None
        cards: list[Card] = []
        try:
            cards = list(source.fetch())
        except CardSourceError as e:
            error = ErrorRecord.from_exception(e)
        except ValidationError as e:
            error = ErrorRecord(
                error_class=CardErrorClass.SCHEMA,
                message=f"Invalid card data: {e.error_count()} errors",
                source_id=source.source_id,
            )
        except Exception as e:  # noqa: BLE001
            error = ErrorRecord(
                error_class=CardErrorClass.FETCH,
                message=f"Execution error: {e}",
                source_id=source.source_id,
            )

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000

        if error is not None:
            self._metrics.record_source_failure(
                source.source_id, error.error_class.value
            )
            log.warning(
                "source_failed",
                error_class=error.error_class.value,
                error=error.message,
                duration_ms=round(duration_ms, 2),
            )
            return SourceLoadResult(
                source_id=source.source_id,
                error=error,
                duration_ms=duration_ms,
            )

        log.info(
            "source_complete",
            cards_loaded=len(cards),
            duration_ms=round(duration_ms, 2),
        )
        return SourceLoadResult(
            source_id=source.source_id,
            cards=cards,
            duration_ms=duration_ms,
        )
