"""Interface en ligne de commande."""

import asyncio
import logging
import sys
from typing import Optional

import click

from flight_search.config import SearchConfig
from flight_search.errors import FlightSearchError
from flight_search.models import CabinClass, FilterCriteria, Offer, SearchQuery, SortKey, TimeBucket, TripType
from flight_search.service import FlightSearchService

logger = logging.getLogger(__name__)


def setup_logging(log_file: Optional[str] = "flight_search.log", level: int = logging.INFO):
    """
    Configure le logging.

    Args:
        log_file: Chemin vers le fichier de log (None pour la console seule)
        level: Niveau de log
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=log_format, datefmt=date_format, handlers=handlers)


def format_offer(offer: Offer) -> str:
    """Résumé d'une offre sur une ligne."""
    hours, remainder = divmod(int(offer.total_duration.total_seconds()), 3600)
    route = " -> ".join(
        [s.origin for s in offer.outbound_segments] + [offer.outbound_segments[-1].destination]
    ) if offer.outbound_segments else "?"
    departure = offer.departure_at.strftime("%Y-%m-%d %H:%M") if offer.departure_at else "?"
    stops = "direct" if offer.stop_count == 0 else f"{offer.stop_count} escale(s)"
    line = f"{offer.price} {offer.currency} | {route} | {departure} | {hours}h{remainder // 60:02d} | {stops}"
    if offer.is_round_trip():
        line += " | aller-retour"
    return line


def _choice(enum_cls):
    return click.Choice([m.value for m in enum_cls], case_sensitive=False)


@click.group()
@click.option("--config", "config_path", default="config.yaml", show_default=True, help="Fichier YAML")
@click.option("--env", "env_path", default=".env", show_default=True, help="Fichier .env")
@click.option("-v", "--verbose", is_flag=True, help="Logs détaillés")
@click.pass_context
def cli(ctx: click.Context, config_path: str, env_path: str, verbose: bool) -> None:
    """Recherche de vols Amadeus."""
    config = SearchConfig.load(config_path, env_path)
    setup_logging(config.log_file, logging.DEBUG if verbose else logging.INFO)
    ctx.obj = config


async def _run_search(config: SearchConfig, query: SearchQuery, criteria: FilterCriteria):
    service = FlightSearchService.from_config(config)
    await service.initialize()
    try:
        offers = await service.search(query)
        return service.refine(offers, criteria)
    finally:
        await service.close()


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("departure_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--return-date", type=click.DateTime(formats=["%Y-%m-%d"]), help="Date de retour (aller-retour)")
@click.option("--adults", default=1, show_default=True, type=click.IntRange(1, 9))
@click.option("--cabin", default=CabinClass.ECONOMY.value, show_default=True, type=_choice(CabinClass))
@click.option("--direct", is_flag=True, help="Vols directs uniquement")
@click.option("--sort", "sort_by", default=SortKey.NONE.value, type=_choice(SortKey))
@click.option("--departure-time", default=TimeBucket.ANY.value, type=_choice(TimeBucket))
@click.option("--arrival-time", default=TimeBucket.ANY.value, type=_choice(TimeBucket))
@click.pass_obj
def search(
    config: SearchConfig,
    origin: str,
    destination: str,
    departure_date,
    return_date,
    adults: int,
    cabin: str,
    direct: bool,
    sort_by: str,
    departure_time: str,
    arrival_time: str,
) -> None:
    """Recherche des offres puis les filtre et les trie."""
    query = SearchQuery(
        origin=origin,
        destination=destination,
        departure_date=departure_date.date(),
        trip_type=TripType.ROUND_TRIP if return_date else TripType.ONE_WAY,
        return_date=return_date.date() if return_date else None,
        passengers=adults,
        cabin_class=CabinClass(cabin.upper()),
        direct_only=direct,
    )
    criteria = FilterCriteria.from_params(sort_by, direct, departure_time, arrival_time)

    try:
        offers = asyncio.run(_run_search(config, query, criteria))
    except FlightSearchError as e:
        logger.error(f"Recherche échouée: {e}", exc_info=True)
        raise click.ClickException(f"La recherche a échoué: {e}")

    if not offers:
        click.echo("Aucune offre trouvée.")
    for offer in offers:
        click.echo(format_offer(offer))


async def _run_locations(config: SearchConfig, term: str):
    service = FlightSearchService.from_config(config)
    try:
        return await service.search_locations(term)
    finally:
        await service.close()


@cli.command()
@click.argument("term")
@click.pass_obj
def locations(config: SearchConfig, term: str) -> None:
    """Suggestions de villes et d'aéroports."""
    try:
        results = asyncio.run(_run_locations(config, term))
    except FlightSearchError as e:
        raise click.ClickException(f"La recherche a échoué: {e}")
    for location in results:
        click.echo(location.label)


async def _run_history(config: SearchConfig, limit: int):
    service = FlightSearchService.from_config(config)
    try:
        await service.initialize()
        if service.history is None:
            return []
        return await service.history.recent_searches(limit)
    finally:
        await service.close()


@cli.command()
@click.option("--limit", default=20, show_default=True, type=click.IntRange(1))
@click.pass_obj
def history(config: SearchConfig, limit: int) -> None:
    """Affiche les dernières recherches."""
    for record in asyncio.run(_run_history(config, limit)):
        dates = record.departure_date.isoformat()
        if record.return_date:
            dates += f" / {record.return_date.isoformat()}"
        click.echo(
            f"{record.searched_at:%Y-%m-%d %H:%M} | {record.origin} -> {record.destination} | "
            f"{dates} | {record.passengers} pax | {record.cabin_class or '-'}"
        )


__all__ = ["cli", "format_offer", "setup_logging"]
