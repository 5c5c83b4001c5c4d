"""Fournisseurs de vols."""

from .amadeus import AmadeusFlightProvider
from .base import FlightProvider

__all__ = ["AmadeusFlightProvider", "FlightProvider"]
