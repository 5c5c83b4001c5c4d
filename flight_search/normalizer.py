"""Normalisation des offres Amadeus en objets Offer."""

import logging
import re
from datetime import timedelta
from typing import List, Mapping

from pydantic import ValidationError

from flight_search.errors import ParseError
from flight_search.models import Offer, Segment
from flight_search.schemas import RawFlightOffer, RawSegment

logger = logging.getLogger(__name__)

# Durée ISO-8601 (ex: "PT2H30M", "P1DT3H")
_DURATION_RE = re.compile(
    r"P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?"
)


def parse_iso_duration(value) -> timedelta:
    """
    Convertit une durée ISO-8601 en timedelta.

    Une chaîne absente ou mal formée donne une durée nulle au lieu d'une erreur.

    Args:
        value: Durée brute (ex: "PT2H30M")

    Returns:
        Durée correspondante, ou timedelta(0)
    """
    if not isinstance(value, str):
        return timedelta(0)
    match = _DURATION_RE.fullmatch(value.strip().upper())
    if not match or not any(match.groupdict().values()):
        logger.warning(f"Durée ISO-8601 illisible: {value!r}")
        return timedelta(0)
    parts = match.groupdict()
    return timedelta(
        days=int(parts["days"] or 0),
        hours=int(parts["hours"] or 0),
        minutes=int(parts["minutes"] or 0),
        seconds=float(parts["seconds"] or 0),
    )


def _to_segment(raw: RawSegment) -> Segment:
    return Segment(
        origin=raw.departure.iata_code,
        destination=raw.arrival.iata_code,
        departure_at=raw.departure.at,
        arrival_at=raw.arrival.at,
        duration=parse_iso_duration(raw.duration),
        flight_number=raw.number,
        carrier=raw.carrier_code,
    )


def normalize_offer(raw_offer: Mapping) -> Offer:
    """
    Convertit une offre brute Amadeus en Offer.

    Le premier itinéraire devient l'aller, le deuxième le retour ; les
    suivants sont ignorés.

    Args:
        raw_offer: Élément du tableau "data" de la réponse Amadeus

    Returns:
        Offre normalisée

    Raises:
        ParseError: si le prix ou la structure de l'offre est invalide
    """
    try:
        parsed = RawFlightOffer.model_validate(raw_offer)
    except ValidationError as e:
        offer_id = raw_offer.get("id") if isinstance(raw_offer, Mapping) else None
        raise ParseError(f"Offre {offer_id!r} invalide: {e}") from e

    itineraries = parsed.itineraries
    outbound = tuple(_to_segment(s) for s in itineraries[0].segments) if itineraries else ()
    inbound = tuple(_to_segment(s) for s in itineraries[1].segments) if len(itineraries) > 1 else ()
    if len(itineraries) > 2:
        logger.debug(f"Offre {parsed.id}: {len(itineraries) - 2} itinéraire(s) supplémentaire(s) ignoré(s)")

    offer = Offer(
        id=parsed.id,
        price=parsed.price.total,
        currency=parsed.price.currency,
        outbound_segments=outbound,
        return_segments=inbound,
        validating_airline=(
            parsed.validating_airline_codes[0] if parsed.validating_airline_codes else None
        ),
    )

    # Les deux extrémités doivent être comparables (toutes deux avec ou sans fuseau)
    try:
        offer.total_duration
    except TypeError as e:
        raise ParseError(f"Offre {parsed.id}: horaires incomparables: {e}") from e

    return offer


def normalize_offers(raw_offers: List[Mapping]) -> List[Offer]:
    """Normalise toutes les offres ; la première offre invalide interrompt tout."""
    offers = [normalize_offer(raw) for raw in raw_offers]
    logger.debug(f"Normalisé {len(offers)} offres")
    return offers
