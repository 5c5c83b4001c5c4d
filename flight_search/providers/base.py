"""Interface de base pour les fournisseurs de vols."""

from typing import List, Protocol

from flight_search.models import Location, Offer, SearchQuery


class FlightProvider(Protocol):
    """Interface pour les fournisseurs de vols."""

    async def search_flights(self, query: SearchQuery) -> List[Offer]:
        """
        Recherche des offres de vols pour une requête donnée.

        Args:
            query: Critères de recherche

        Returns:
            Offres normalisées, dans l'ordre renvoyé par le fournisseur
        """
        ...

    async def search_locations(self, term: str) -> List[Location]:
        """
        Recherche des villes et aéroports correspondant à un texte libre.

        Args:
            term: Texte saisi par l'utilisateur

        Returns:
            Suggestions d'autocomplétion
        """
        ...

    async def close(self):
        """Libère les ressources réseau."""
        ...
