from __future__ import annotations

import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError

from .config import Settings, get_settings
from .kiwi_fetcher import KiwiFetcher, KiwiFetcherError
from .models import CabinClass, SortKey
from .query import QueryError
from .server import ContextServer
from .tools import PlanTripTool, ToolRegistry
from .transport import serve as serve_stdio

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def load_settings() -> Settings:
    """Return settings or exit with status 1 when ``KIWI_API_KEY`` is unusable."""
    try:
        return get_settings()
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        if "KIWI_API_KEY" in fields or "kiwi_api_key" in fields:
            click.echo("KIWI_API_KEY environment variable is required", err=True)
        else:
            click.echo(f"Invalid configuration: {exc}", err=True)
        sys.exit(1)


def setup_logging(level: str) -> None:
    # stdout carries protocol messages only
    logging.basicConfig(level=level, stream=sys.stderr, format=LOG_FORMAT)


def build_server(fetcher: KiwiFetcher) -> ContextServer:
    registry = ToolRegistry()
    registry.register(PlanTripTool(fetcher))
    return ContextServer(registry)


@click.group()
def cli() -> None:
    """Kiwi flight search MCP server."""


@cli.command()
def serve() -> None:
    """Serve JSON-RPC requests on stdin/stdout."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger.info("Starting kiwi-mcp on stdio")
    fetcher = KiwiFetcher.from_settings(settings)
    try:
        serve_stdio(build_server(fetcher))
    finally:
        fetcher.close()


@cli.command()
@click.argument("fly_from")
@click.argument("fly_to")
@click.option("--date-from", required=True, help="Earliest departure (dd/mm/yyyy)")
@click.option("--date-to", required=True, help="Latest departure (dd/mm/yyyy)")
@click.option("--return-from", help="Earliest return departure (dd/mm/yyyy)")
@click.option("--return-to", help="Latest return departure (dd/mm/yyyy)")
@click.option("--adults", type=int, default=1, show_default=True)
@click.option("--children", type=int, default=0, show_default=True)
@click.option("--infants", type=int, default=0, show_default=True)
@click.option(
    "--cabin",
    "selected_cabins",
    type=click.Choice([c.value for c in CabinClass]),
    default=CabinClass.ECONOMY.value,
    show_default=True,
)
@click.option("--currency", "curr", default="EUR", show_default=True)
@click.option("--max-stopovers", type=int, default=2, show_default=True)
@click.option(
    "--sort",
    type=click.Choice([s.value for s in SortKey]),
    default=SortKey.PRICE.value,
    show_default=True,
)
@click.option("--limit", type=int, default=5, show_default=True)
def search(
    fly_from: str,
    fly_to: str,
    date_from: str,
    date_to: str,
    return_from: Optional[str],
    return_to: Optional[str],
    adults: int,
    children: int,
    infants: int,
    selected_cabins: str,
    curr: str,
    max_stopovers: int,
    sort: str,
    limit: int,
) -> None:
    """Run plan_trip once and print the result."""
    settings = load_settings()
    setup_logging(settings.log_level)

    arguments = {
        "fly_from": fly_from,
        "fly_to": fly_to,
        "date_from": date_from,
        "date_to": date_to,
        "adults": adults,
        "children": children,
        "infants": infants,
        "selected_cabins": selected_cabins,
        "curr": curr,
        "max_stopovers": max_stopovers,
        "sort": sort,
        "limit": limit,
    }
    if return_from:
        arguments["return_from"] = return_from
    if return_to:
        arguments["return_to"] = return_to

    fetcher = KiwiFetcher.from_settings(settings)
    try:
        content = PlanTripTool(fetcher).execute(arguments)
    except (QueryError, KiwiFetcherError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        fetcher.close()
    for item in content:
        click.echo(item.text)


if __name__ == "__main__":
    cli()
