"""Tests pour la gestion du token Amadeus."""

import asyncio
from datetime import datetime, timedelta, timezone

import aiohttp
import pytest

from flight_search.auth import TokenManager
from flight_search.config import AmadeusConfig
from flight_search.errors import AuthError


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def session():
    session = aiohttp.ClientSession()
    yield session
    await session.close()


@pytest.fixture
def tokens(amadeus_config, session, clock):
    """Gestionnaire de token branché sur le faux serveur, horloge contrôlée."""

    async def get_session():
        return session

    return TokenManager(amadeus_config, get_session, clock=clock)


@pytest.mark.asyncio
async def test_token_reused_within_expiry(tokens, amadeus, clock):
    """Deux appels dans la fenêtre de validité : un seul appel réseau."""
    first = await tokens.get_token()
    clock.now += timedelta(seconds=1000)
    second = await tokens.get_token()

    assert amadeus.token_calls == 1
    assert second.token == first.token == "tok-1"
    assert second is first


@pytest.mark.asyncio
async def test_client_credentials_request(tokens, amadeus):
    """La requête utilise le flux client-credentials avec les identifiants configurés."""
    await tokens.get_token()

    assert amadeus.token_forms == [
        {"grant_type": "client_credentials", "client_id": "test-key", "client_secret": "test-secret"}
    ]


@pytest.mark.asyncio
async def test_token_replaced_at_expiry(tokens, amadeus, clock):
    """À l'instant d'expiration, le token est remplacé par un nouveau."""
    first = await tokens.get_token()
    assert first.expires_at == clock.now + timedelta(seconds=1799)

    clock.now = first.expires_at
    second = await tokens.get_token()

    assert amadeus.token_calls == 2
    assert second.token == "tok-2"
    assert tokens.credential is second


@pytest.mark.asyncio
async def test_expires_in_from_response(tokens, amadeus, clock):
    """La durée de vie renvoyée par l'API est utilisée."""
    amadeus.token_payload = {"access_token": "short", "expires_in": 60}

    credential = await tokens.get_token()

    assert credential.expires_at == clock.now + timedelta(seconds=60)


@pytest.mark.parametrize("payload", [{"access_token": "abc"}, {"access_token": "abc", "expires_in": "soon"}])
@pytest.mark.asyncio
async def test_default_ttl_when_expiry_missing_or_invalid(tokens, amadeus, clock, payload):
    """Sans durée de vie lisible, le token vit 1799 secondes."""
    amadeus.token_payload = payload

    credential = await tokens.get_token()

    assert credential.token == "abc"
    assert credential.expires_at == clock.now + timedelta(seconds=1799)


@pytest.mark.asyncio
async def test_non_success_status_raises_auth_error(tokens, amadeus):
    """Un refus du endpoint d'authentification lève AuthError."""
    amadeus.token_status = 401
    amadeus.token_payload = {"error": "invalid_client"}

    with pytest.raises(AuthError):
        await tokens.get_token()
    assert tokens.credential is None


@pytest.mark.parametrize("payload", ["not json", {"token_type": "Bearer"}, {"access_token": ""}])
@pytest.mark.asyncio
async def test_malformed_body_raises_auth_error(tokens, amadeus, payload):
    """Une réponse sans token exploitable lève AuthError."""
    amadeus.token_payload = payload

    with pytest.raises(AuthError):
        await tokens.get_token()


@pytest.mark.asyncio
async def test_network_failure_raises_auth_error(session):
    """Un endpoint injoignable lève AuthError."""

    async def get_session():
        return session

    config = AmadeusConfig(api_key="k", api_secret="s", base_url="http://127.0.0.1:1")
    tokens = TokenManager(config, get_session)

    with pytest.raises(AuthError):
        await tokens.get_token()


@pytest.mark.asyncio
async def test_concurrent_refresh_is_single_flight(tokens, amadeus):
    """Des appels concurrents partagent un seul renouvellement."""
    amadeus.token_delay = 0.05

    results = await asyncio.gather(*(tokens.get_token() for _ in range(5)))

    assert amadeus.token_calls == 1
    assert {c.token for c in results} == {"tok-1"}


@pytest.mark.asyncio
async def test_failed_refresh_discards_expired_token(tokens, amadeus, clock):
    """Un token expiré n'est jamais réutilisé, même si le renouvellement échoue."""
    first = await tokens.get_token()
    clock.now = first.expires_at + timedelta(seconds=1)
    amadeus.token_status = 500

    with pytest.raises(AuthError):
        await tokens.get_token()
    assert tokens.credential is None


@pytest.mark.parametrize("expires_in", [0, -30])
@pytest.mark.asyncio
async def test_non_positive_expiry_uses_default_ttl(tokens, amadeus, clock, expires_in):
    """Une durée de vie nulle ou négative retombe sur 1799 secondes."""
    amadeus.token_payload = {"access_token": "abc", "expires_in": expires_in}

    credential = await tokens.get_token()

    assert credential.expires_at == clock.now + timedelta(seconds=1799)
    assert credential.is_valid(clock.now)
