"""Filtrage et tri en mémoire d'offres déjà récupérées."""

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from flight_search.models import FilterCriteria, Offer, SortKey, TimeBucket, parse_enum

logger = logging.getLogger(__name__)

# Clé de tri -> (fonction de clé, ordre décroissant)
_SORTS: Dict[SortKey, Tuple[Callable[[Offer], object], bool]] = {
    SortKey.PRICE_ASC: (lambda o: o.price, False),
    SortKey.PRICE_DESC: (lambda o: o.price, True),
    SortKey.DURATION_ASC: (lambda o: o.total_duration, False),
    SortKey.DURATION_DESC: (lambda o: o.total_duration, True),
    SortKey.STOPS_ASC: (lambda o: o.stop_count, False),
}


def classify_hour(hour: int) -> TimeBucket:
    """
    Classe une heure de la journée dans une tranche horaire.

    matin = [6, 12), après-midi = [12, 18), soir = [18, 24) et [0, 6).
    """
    if 6 <= hour < 12:
        return TimeBucket.MORNING
    if 12 <= hour < 18:
        return TimeBucket.AFTERNOON
    return TimeBucket.EVENING


def _in_bucket(moment: Optional[datetime], bucket: TimeBucket) -> bool:
    # Heure locale à l'horodatage, sans conversion de fuseau
    if moment is None:
        return False
    return classify_hour(moment.hour) == bucket


def _predicates(criteria: FilterCriteria) -> List[Callable[[Offer], bool]]:
    predicates = []

    if criteria.direct_only is True:
        predicates.append(lambda o: o.stop_count == 0)

    departure = parse_enum(TimeBucket, criteria.departure_time, TimeBucket.ANY)
    if departure != TimeBucket.ANY:
        predicates.append(lambda o: _in_bucket(o.departure_at, departure))

    arrival = parse_enum(TimeBucket, criteria.arrival_time, TimeBucket.ANY)
    if arrival != TimeBucket.ANY:
        predicates.append(lambda o: _in_bucket(o.arrival_at, arrival))

    return predicates


def filter_offers(offers: Iterable[Offer], criteria: FilterCriteria) -> List[Offer]:
    """Garde les offres satisfaisant tous les critères actifs, dans l'ordre d'entrée."""
    predicates = _predicates(criteria)
    return [offer for offer in offers if all(p(offer) for p in predicates)]


def sort_offers(offers: Iterable[Offer], sort_by) -> List[Offer]:
    """
    Trie les offres selon une seule clé.

    Le tri est stable : à clé égale, l'ordre d'entrée est conservé (y compris
    en ordre décroissant). Une clé inconnue laisse l'ordre inchangé.
    """
    key = parse_enum(SortKey, sort_by, SortKey.NONE)
    if key not in _SORTS:
        return list(offers)
    key_func, descending = _SORTS[key]
    return sorted(offers, key=key_func, reverse=descending)


def apply_filters(offers: Iterable[Offer], criteria: FilterCriteria) -> List[Offer]:
    """
    Applique filtres puis tri à une liste d'offres déjà récupérées.

    Fonction pure : aucune entrée/sortie, la liste d'entrée n'est pas modifiée.

    Args:
        offers: Offres obtenues lors d'une recherche précédente
        criteria: Filtres et tri choisis par l'utilisateur

    Returns:
        Nouvelle liste filtrée et triée
    """
    offers = list(offers)
    filtered = filter_offers(offers, criteria)
    result = sort_offers(filtered, criteria.sort_by)
    logger.debug(f"Filtrage: {len(offers)} -> {len(result)} offres ({criteria})")
    return result
