"""Provider Amadeus pour la recherche de vols et de lieux."""

import asyncio
import aiohttp
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from flight_search.auth import DEFAULT_TOKEN_TTL, TokenManager
from flight_search.config import AmadeusConfig, SearchConfig
from flight_search.errors import ParseError, UpstreamError
from flight_search.models import Credential, Location, Offer, SearchQuery
from flight_search.normalizer import normalize_offers
from flight_search.schemas import FlightOffersResponse, LocationsResponse, RawLocation

logger = logging.getLogger(__name__)


class AmadeusFlightProvider:
    """Provider pour l'API Amadeus."""

    def __init__(
        self,
        config: AmadeusConfig,
        currency: str = "USD",
        max_results: int = 50,
        location_page_size: int = 10,
        min_term_length: int = 2,
        request_timeout: float = 30.0,
        default_token_ttl: int = DEFAULT_TOKEN_TTL,
        token_manager: Optional[TokenManager] = None,
    ):
        """
        Initialise le provider Amadeus.

        Args:
            config: Configuration Amadeus avec API key et secret
            currency: Devise demandée pour les prix
            max_results: Nombre maximum d'offres demandées
            location_page_size: Nombre maximum de suggestions de lieux
            min_term_length: Longueur minimale d'un texte d'autocomplétion
            request_timeout: Délai maximal d'une requête HTTP, en secondes
            default_token_ttl: Durée de vie du token si l'API ne la précise pas
            token_manager: Gestionnaire de token à partager (créé sinon)
        """
        self.config = config
        self.currency = currency
        self.max_results = max_results
        self.location_page_size = location_page_size
        self.min_term_length = min_term_length
        self.request_timeout = request_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self.tokens = token_manager or TokenManager(
            config, self._get_session, default_ttl=default_token_ttl
        )

    @classmethod
    def from_config(cls, config: SearchConfig) -> "AmadeusFlightProvider":
        """Crée le provider depuis la configuration globale."""
        return cls(
            config.amadeus,
            currency=config.currency,
            max_results=config.max_results,
            location_page_size=config.location_page_size,
            min_term_length=config.min_location_term_length,
            request_timeout=config.request_timeout,
            default_token_ttl=config.default_token_ttl,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Obtient ou crée une session HTTP."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self):
        """Ferme la session HTTP."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get(self, path: str, params: Dict[str, str], credential: Credential) -> Tuple[int, str]:
        """Effectue un GET authentifié et renvoie (statut, corps)."""
        url = f"{self.config.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {credential.token}",
            "Accept": "application/json",
        }
        try:
            session = await self._get_session()
            async with session.get(url, headers=headers, params=params) as response:
                return response.status, await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Erreur réseau vers Amadeus ({path}): {e}")
            raise UpstreamError(f"Amadeus injoignable: {e}") from e

    def build_flight_params(self, query: SearchQuery) -> Dict[str, str]:
        """
        Construit les paramètres de /v2/shopping/flight-offers.

        Args:
            query: Requête de recherche validée

        Returns:
            Paramètres de requête
        """
        params = {
            "originLocationCode": query.origin.strip().upper(),
            "destinationLocationCode": query.destination.strip().upper(),
            "departureDate": query.departure_date.strftime("%Y-%m-%d"),
            "adults": str(query.passengers),
            "currencyCode": self.currency,
            "max": str(self.max_results),
        }

        if query.cabin_class:
            params["travelClass"] = query.cabin_class.value

        if query.is_round_trip() and query.return_date:
            params["returnDate"] = query.return_date.strftime("%Y-%m-%d")

        if query.direct_only:
            params["nonStop"] = "true"

        return params

    async def search_flights(self, query: SearchQuery) -> List[Offer]:
        """
        Recherche des offres de vols.

        Args:
            query: Critères de recherche

        Returns:
            Offres normalisées

        Raises:
            InvalidQueryError: si la requête est incohérente (aucun appel réseau)
            AuthError: si aucun token ne peut être obtenu
            UpstreamError: si Amadeus répond par une erreur
            ParseError: si une offre ne peut pas être normalisée
        """
        query.validate()
        credential = await self.tokens.get_token()
        params = self.build_flight_params(query)

        logger.info(
            f"Recherche Amadeus: {params['originLocationCode']} -> "
            f"{params['destinationLocationCode']} le {params['departureDate']}"
        )
        status, body = await self._get(self.config.flight_offers_url, params, credential)
        if status != 200:
            logger.error(f"Erreur API Amadeus: {status} - {body}")
            raise UpstreamError("La recherche de vols a échoué", status=status, body=body)

        try:
            response = FlightOffersResponse.model_validate_json(body)
        except ValidationError as e:
            raise ParseError(f"Réponse de recherche illisible: {e}") from e

        offers = normalize_offers(response.data)
        logger.info(
            f"Parsé {len(offers)} offres pour "
            f"{params['originLocationCode']} -> {params['destinationLocationCode']}"
        )
        return offers

    async def search_locations(self, term: str) -> List[Location]:
        """
        Recherche des villes et aéroports pour l'autocomplétion.

        Les textes trop courts renvoient une liste vide sans appel réseau ;
        les lignes mal formées sont ignorées.

        Args:
            term: Texte saisi par l'utilisateur

        Returns:
            Suggestions (au plus location_page_size)
        """
        # Le texte est transmis tel quel ; seuls les textes vides ou trop courts sont écartés
        if not term or not term.strip() or len(term) < self.min_term_length:
            return []

        credential = await self.tokens.get_token()
        params = {
            "subType": "CITY,AIRPORT",
            "keyword": term,
            "page[limit]": str(self.location_page_size),
        }
        status, body = await self._get(self.config.locations_url, params, credential)
        if status != 200:
            logger.error(f"Erreur API Amadeus (lieux): {status} - {body}")
            raise UpstreamError("La recherche de lieux a échoué", status=status, body=body)

        try:
            response = LocationsResponse.model_validate_json(body)
        except ValidationError as e:
            raise UpstreamError(f"Réponse de lieux illisible: {e}", status=status, body=body) from e

        locations = []
        for row in response.data:
            try:
                raw = RawLocation.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Lieu ignoré (ligne invalide): {e.error_count()} erreur(s)")
                continue
            locations.append(
                Location(
                    name=raw.address.city_name,
                    iata_code=raw.iata_code,
                    country_code=raw.address.country_code,
                    facility_name=raw.name,
                    sub_type=raw.sub_type,
                )
            )

        logger.info(f"{len(locations)} lieux trouvés pour '{term}'")
        return locations
