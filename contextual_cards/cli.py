"""CLI commands for inspecting card catalogs."""

import json
import logging
import sys
from pathlib import Path

import click
import structlog

from contextual_cards.cards.models import Card, CardType
from contextual_cards.config.loader import CatalogLoader, ConfigValidationError
from contextual_cards.config.schemas import CardCatalogConfig
from contextual_cards.loader.runner import CardLoader
from contextual_cards.loader.sources import CatalogCardSource
from contextual_cards.manager.manager import ContextualCardManager
from contextual_cards.observability.logging import configure_logging
from contextual_cards.observability.metrics import CardMetrics
from contextual_cards.settings.app import get_settings


logger = structlog.get_logger()


def _load_catalog(catalog_path: Path) -> CardCatalogConfig:
    """Load a catalog, exit with a readable report on failure."""
    try:
        return CatalogLoader().load(catalog_path)
    except ConfigValidationError as e:
        click.echo("Catalog validation failed:", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']} ({error['type']})", err=True)
        sys.exit(1)


def _card_to_dict(card: Card) -> dict[str, object]:
    return {
        "name": card.name,
        "card_type": card.card_type.value,
        "ranking_score": card.ranking_score,
        "payload": dict(card.payload),
    }


class _CollectingListener:
    """Keeps the last list published by the manager."""

    def __init__(self) -> None:
        self.cards: list[Card] = []

    def on_cards_updated(self, cards: dict[CardType, list[Card]]) -> None:
        self.cards = list(cards[CardType.DEFAULT])


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Contextual cards CLI."""


@cli.command()
@click.option(
    "--catalog",
    "catalog_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to the card catalog YAML file.",
)
def validate(catalog_path: Path) -> None:
    """Validate a card catalog without loading it."""
    configure_logging(level=logging.WARNING, json_format=False)
    catalog = _load_catalog(catalog_path)

    card_count = sum(len(source.cards) for source in catalog.sources)
    click.echo("Catalog is valid!")
    click.echo(f"  Sources: {len(catalog.sources)}")
    click.echo(f"  Cards: {card_count}")


@cli.command()
@click.option(
    "--catalog",
    "catalog_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to the card catalog YAML file.",
)
@click.option(
    "--saved-name",
    "saved_names",
    multiple=True,
    help="Name of a card shown before restart (repeatable).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: from settings).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.option(
    "--metrics",
    "show_metrics",
    is_flag=True,
    help="Print Prometheus metrics after the load.",
)
def load(
    catalog_path: Path,
    saved_names: tuple[str, ...],
    json_logs: bool | None,
    verbose: bool,
    show_metrics: bool,
) -> None:
    """Run one aggregate load from a catalog and print the ranked cards."""
    settings = get_settings()
    log_level = logging.DEBUG if verbose else settings.log_level_value
    configure_logging(
        level=log_level,
        json_format=settings.log_json if json_logs is None else json_logs,
    )
    log = logger.bind(component="cli", command="load")

    catalog = _load_catalog(catalog_path)
    loader = CardLoader(
        CatalogCardSource.from_catalog(catalog),
        max_workers=settings.loader_max_workers,
    )
    manager = ContextualCardManager(
        loader=loader,
        saved_card_names=list(saved_names) or None,
        settings=settings,
    )
    listener = _CollectingListener()
    manager.set_listener(listener)

    session = manager.load_cards()
    log.info("cli_load_complete", session_id=session.session_id, cards=len(listener.cards))

    click.echo(json.dumps([_card_to_dict(card) for card in listener.cards], indent=2))
    if show_metrics:
        click.echo(CardMetrics.get_instance().to_prometheus_format())


if __name__ == "__main__":
    cli()
