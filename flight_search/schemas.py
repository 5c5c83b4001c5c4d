"""Schémas explicites des réponses de l'API Amadeus."""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenResponse(_Payload):
    """Réponse du endpoint OAuth2 client-credentials."""

    access_token: str = Field(min_length=1)
    expires_in: Optional[int] = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def _lenient_expiry(cls, v):
        # Une durée illisible ou non positive est traitée comme absente
        if v is None or isinstance(v, bool):
            return None
        try:
            ttl = int(v)
        except (TypeError, ValueError):
            return None
        return ttl if ttl > 0 else None


class RawEndpoint(_Payload):
    iata_code: str = Field(alias="iataCode")
    at: datetime


class RawSegment(_Payload):
    departure: RawEndpoint
    arrival: RawEndpoint
    carrier_code: str = Field(alias="carrierCode")
    number: str
    # Chaîne ISO-8601 laissée brute : son parsing est tolérant
    duration: Optional[str] = None

    @field_validator("number", mode="before")
    @classmethod
    def _number_as_str(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _lenient_duration(cls, v):
        # Une durée qui n'est pas une chaîne vaudra zéro à la normalisation
        return v if isinstance(v, str) else None


class RawItinerary(_Payload):
    segments: List[RawSegment]


class RawPrice(_Payload):
    total: Decimal
    currency: str
    grand_total: Optional[Decimal] = Field(default=None, alias="grandTotal")

    @field_validator("total")
    @classmethod
    def _finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("prix non numérique")
        return v


class RawFlightOffer(_Payload):
    """Une offre de vol telle que renvoyée par /v2/shopping/flight-offers."""

    id: str
    price: RawPrice
    itineraries: List[RawItinerary]
    validating_airline_codes: List[str] = Field(default_factory=list, alias="validatingAirlineCodes")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class FlightOffersResponse(_Payload):
    """Enveloppe de la réponse de recherche ; chaque offre est validée séparément."""

    data: List[Any] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v):
        return [] if v is None else v


class RawAddress(_Payload):
    city_name: str = Field(alias="cityName")
    country_code: str = Field(alias="countryCode")


class RawLocation(_Payload):
    """Une ligne de /v1/reference-data/locations."""

    name: str
    iata_code: str = Field(alias="iataCode")
    sub_type: Optional[str] = Field(default=None, alias="subType")
    address: RawAddress


class LocationsResponse(_Payload):
    data: List[Any] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v):
        return [] if v is None else v
