"""Orchestration d'une recherche : validation, historique, fournisseur, filtres."""

import logging
from typing import List, Optional
from flight_search.config import SearchConfig
from flight_search.filters import apply_filters
from flight_search.models import FilterCriteria, Location, Offer, SearchQuery
from flight_search.providers import AmadeusFlightProvider, FlightProvider
from flight_search.storage import SearchHistoryStorage

logger = logging.getLogger(__name__)


class FlightSearchService:
    """Point d'entrée appelé par la couche web ou la ligne de commande."""

    def __init__(self, provider: FlightProvider, history: Optional[SearchHistoryStorage] = None):
        """
        Initialise le service.

        Args:
            provider: Fournisseur de vols
            history: Historique des recherches (optionnel)
        """
        self.provider = provider
        self.history = history

    @classmethod
    def from_config(cls, config: SearchConfig) -> "FlightSearchService":
        """Construit le service et ses dépendances depuis la configuration."""
        history = SearchHistoryStorage(config.db_path) if config.history_enabled else None
        return cls(AmadeusFlightProvider.from_config(config), history)

    async def initialize(self):
        """Initialise l'historique s'il est activé."""
        if self.history is None:
            return
        try:
            await self.history.init_db()
        except Exception as e:
            logger.warning(f"Historique désactivé (initialisation impossible): {e}")
            self.history = None

    async def close(self):
        """Libère les ressources réseau."""
        await self.provider.close()

    async def search(self, query: SearchQuery) -> List[Offer]:
        """
        Lance une recherche de vols.

        La requête est validée avant tout appel ; l'écriture dans l'historique
        ne bloque jamais la recherche. L'appelant conserve la liste renvoyée
        pour la passer ensuite à refine().

        Args:
            query: Critères de recherche

        Returns:
            Offres normalisées
        """
        query.validate()

        if self.history is not None:
            await self.history.record_search(query)

        logger.info(
            f"Recherche {query.trip_type.value}: {query.origin} -> {query.destination} "
            f"le {query.departure_date} ({query.passengers} passager(s))"
        )
        return await self.provider.search_flights(query)

    async def search_locations(self, term: str) -> List[Location]:
        """Suggestions de villes et d'aéroports pour l'autocomplétion."""
        return await self.provider.search_locations(term)

    def refine(self, offers: List[Offer], criteria: FilterCriteria) -> List[Offer]:
        """Filtre et trie en mémoire des offres obtenues précédemment."""
        return apply_filters(offers, criteria)
