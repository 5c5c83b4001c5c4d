"""Modèles de données du moteur de recherche de vols."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Type, TypeVar

from flight_search.errors import InvalidQueryError

MAX_PASSENGERS = 9

E = TypeVar("E", bound=Enum)


class TripType(str, Enum):
    """Type de voyage."""

    ONE_WAY = "one-way"
    ROUND_TRIP = "round-trip"


class CabinClass(str, Enum):
    """Classe de cabine acceptée par le fournisseur."""

    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


class SortKey(str, Enum):
    """Clé de tri applicable à une liste d'offres."""

    NONE = "none"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    DURATION_ASC = "duration-asc"
    DURATION_DESC = "duration-desc"
    STOPS_ASC = "stops-asc"


class TimeBucket(str, Enum):
    """Tranche horaire grossière d'une heure de la journée."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANY = "any"


def parse_enum(enum_cls: Type[E], value, default: E) -> E:
    """
    Convertit une valeur brute en membre d'enum, sans lever d'erreur.

    Les chaînes sont comparées sans tenir compte de la casse ; toute valeur
    inconnue retombe sur ``default``.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip()
        for member in enum_cls:
            if member.value.lower() == normalized.lower():
                return member
    return default


@dataclass
class SearchQuery:
    """Critères d'une recherche de vols, construits par l'appelant."""

    origin: str
    destination: str
    departure_date: date
    trip_type: TripType = TripType.ONE_WAY
    return_date: Optional[date] = None
    passengers: int = 1
    cabin_class: Optional[CabinClass] = CabinClass.ECONOMY
    direct_only: bool = False
    origin_name: Optional[str] = None
    destination_name: Optional[str] = None

    def __post_init__(self):
        # Un datetime est ramené à sa date pour rester comparable
        if isinstance(self.departure_date, datetime):
            self.departure_date = self.departure_date.date()
        if isinstance(self.return_date, datetime):
            self.return_date = self.return_date.date()
        # Valeurs brutes (formulaire, JSON) converties en enums quand elles sont connues
        if isinstance(self.trip_type, str) and not isinstance(self.trip_type, TripType):
            self.trip_type = parse_enum(TripType, self.trip_type, self.trip_type)
        if isinstance(self.cabin_class, str) and not isinstance(self.cabin_class, CabinClass):
            if self.cabin_class.strip():
                self.cabin_class = parse_enum(CabinClass, self.cabin_class, self.cabin_class)
            else:
                self.cabin_class = None

    def is_round_trip(self) -> bool:
        """Indique si c'est une recherche aller-retour."""
        return self.trip_type == TripType.ROUND_TRIP

    def validate(self):
        """
        Vérifie la cohérence de la requête.

        Raises:
            InvalidQueryError: si un critère est manquant ou incohérent
        """
        if not isinstance(self.trip_type, TripType):
            raise InvalidQueryError(f"Type de voyage inconnu: {self.trip_type!r}")
        if not self.origin or not self.origin.strip():
            raise InvalidQueryError("Le code de l'aéroport d'origine est obligatoire")
        if not self.destination or not self.destination.strip():
            raise InvalidQueryError("Le code de l'aéroport de destination est obligatoire")
        if not isinstance(self.departure_date, date):
            raise InvalidQueryError("La date de départ est obligatoire")
        if (
            isinstance(self.passengers, bool)
            or not isinstance(self.passengers, int)
            or not 1 <= self.passengers <= MAX_PASSENGERS
        ):
            raise InvalidQueryError(
                f"Le nombre de passagers doit être compris entre 1 et {MAX_PASSENGERS}"
            )
        if self.cabin_class is not None and not isinstance(self.cabin_class, CabinClass):
            raise InvalidQueryError(f"Classe de cabine inconnue: {self.cabin_class!r}")
        if self.is_round_trip() and self.return_date is None:
            raise InvalidQueryError("La date de retour est obligatoire pour un aller-retour")
        if self.return_date is not None and self.return_date < self.departure_date:
            raise InvalidQueryError("La date de retour ne peut pas précéder la date de départ")


@dataclass(frozen=True)
class Credential:
    """Token d'accès porteur et son instant d'expiration absolu."""

    token: str = field(repr=False)
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        """Un token est valide strictement avant son expiration."""
        return now < self.expires_at


@dataclass(frozen=True)
class Segment:
    """Un tronçon de vol sans escale."""

    origin: str
    destination: str
    departure_at: datetime
    arrival_at: datetime
    duration: timedelta
    flight_number: str
    carrier: str


@dataclass(frozen=True)
class Offer:
    """Une offre de vol tarifée, normalisée depuis la réponse du fournisseur."""

    id: str
    price: Decimal
    currency: str
    outbound_segments: Tuple[Segment, ...]
    return_segments: Tuple[Segment, ...] = ()
    validating_airline: Optional[str] = None

    @property
    def stop_count(self) -> int:
        """Nombre d'escales de l'aller (0 par convention si l'aller est vide)."""
        return max(len(self.outbound_segments) - 1, 0)

    @property
    def total_duration(self) -> timedelta:
        """Durée entre le premier départ et la dernière arrivée de l'aller."""
        if not self.outbound_segments:
            return timedelta(0)
        return self.outbound_segments[-1].arrival_at - self.outbound_segments[0].departure_at

    @property
    def departure_at(self) -> Optional[datetime]:
        if not self.outbound_segments:
            return None
        return self.outbound_segments[0].departure_at

    @property
    def arrival_at(self) -> Optional[datetime]:
        if not self.outbound_segments:
            return None
        return self.outbound_segments[-1].arrival_at

    def is_round_trip(self) -> bool:
        """Indique si l'offre comporte un retour."""
        return bool(self.return_segments)


@dataclass(frozen=True)
class Location:
    """Ville ou aéroport proposé par l'autocomplétion."""

    name: str
    iata_code: str
    country_code: str
    facility_name: str
    sub_type: Optional[str] = None

    @property
    def label(self) -> str:
        """Libellé affiché dans la liste de suggestions."""
        return f"{self.name} ({self.iata_code}) - {self.facility_name}"

    @property
    def value(self) -> str:
        """Valeur recopiée dans le champ de saisie."""
        return f"{self.name} ({self.iata_code})"


@dataclass(frozen=True)
class FilterCriteria:
    """Filtres et tri sélectionnés par l'utilisateur sur des résultats déjà obtenus."""

    sort_by: SortKey = SortKey.NONE
    direct_only: bool = False
    departure_time: TimeBucket = TimeBucket.ANY
    arrival_time: TimeBucket = TimeBucket.ANY

    @classmethod
    def from_params(
        cls,
        sort_by: Optional[str] = None,
        direct_only: Optional[bool] = None,
        departure_time: Optional[str] = None,
        arrival_time: Optional[str] = None,
    ) -> "FilterCriteria":
        """Construit des critères depuis des paramètres bruts (valeurs inconnues ignorées)."""
        return cls(
            sort_by=parse_enum(SortKey, sort_by, SortKey.NONE),
            direct_only=direct_only is True,
            departure_time=parse_enum(TimeBucket, departure_time, TimeBucket.ANY),
            arrival_time=parse_enum(TimeBucket, arrival_time, TimeBucket.ANY),
        )


@dataclass
class SearchRecord:
    """Une entrée de l'historique des recherches."""

    origin: str
    destination: str
    departure_date: date
    trip_type: str
    passengers: int
    cabin_class: Optional[str]
    searched_at: datetime
    return_date: Optional[date] = None
    origin_name: Optional[str] = None
    destination_name: Optional[str] = None
    id: Optional[int] = None
