"""Gestion du token OAuth2 Amadeus."""

import asyncio
import aiohttp
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from flight_search.config import AmadeusConfig
from flight_search.errors import AuthError
from flight_search.models import Credential
from flight_search.schemas import TokenResponse

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = 1799


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """Obtient et met en cache le token porteur, renouvelé à l'expiration."""

    def __init__(
        self,
        config: AmadeusConfig,
        session_getter: Callable[[], Awaitable[aiohttp.ClientSession]],
        default_ttl: int = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialise le gestionnaire de token.

        Args:
            config: Configuration Amadeus (identifiants et URL)
            session_getter: Coroutine renvoyant la session HTTP à utiliser
            default_ttl: Durée de vie en secondes si la réponse n'en fournit pas
            clock: Horloge (injectable pour les tests)
        """
        self.config = config
        self._session_getter = session_getter
        self.default_ttl = default_ttl
        self._clock = clock
        self._credential: Optional[Credential] = None
        # Un seul renouvellement en vol à la fois
        self._refresh_lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def _cached(self) -> Optional[Credential]:
        credential = self._credential
        if credential is not None and credential.is_valid(self._clock()):
            return credential
        return None

    async def get_token(self) -> Credential:
        """
        Renvoie un token valide, en le renouvelant si nécessaire.

        Returns:
            Token en cache s'il est encore valide, sinon un nouveau token

        Raises:
            AuthError: si le fournisseur refuse ou renvoie une réponse invalide
        """
        credential = self._cached()
        if credential is not None:
            return credential

        async with self._refresh_lock:
            # Un autre appelant a pu renouveler pendant l'attente du verrou
            credential = self._cached()
            if credential is not None:
                return credential
            self._credential = None
            credential = await self._request_token()
            self._credential = credential
            return credential

    async def _request_token(self) -> Credential:
        url = f"{self.config.base_url}{self.config.token_url}"
        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.api_key,
            "client_secret": self.config.api_secret,
        }

        try:
            session = await self._session_getter()
            async with session.post(url, data=data) as response:
                body = await response.text()
                if response.status != 200:
                    logger.error(f"Échec authentification Amadeus: {response.status} - {body}")
                    raise AuthError(f"Authentification refusée (HTTP {response.status})")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Erreur réseau lors de l'authentification Amadeus: {e}")
            raise AuthError(f"Endpoint d'authentification injoignable: {e}") from e

        try:
            token = TokenResponse.model_validate_json(body)
        except ValidationError as e:
            logger.error("Réponse d'authentification Amadeus invalide")
            raise AuthError("Réponse d'authentification invalide") from e

        ttl = token.expires_in if token.expires_in is not None else self.default_ttl
        credential = Credential(
            token=token.access_token,
            expires_at=self._clock() + timedelta(seconds=ttl),
        )
        logger.info(f"Authentification Amadeus réussie (expiration dans {ttl}s)")
        return credential
