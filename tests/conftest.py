"""Fixtures communes : faux serveur Amadeus et provider branché dessus."""

import asyncio
import json

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from flight_search.config import AmadeusConfig
from flight_search.providers import AmadeusFlightProvider


class FakeAmadeus:
    """Serveur HTTP minimal imitant les endpoints Amadeus utilisés."""

    def __init__(self):
        self.base_url = ""
        self.token_calls = 0
        self.token_forms = []
        self.token_status = 200
        self.token_payload = None  # None : un nouveau token à chaque appel
        self.token_delay = 0.0
        self.offers_status = 200
        self.offers_payload = {"data": []}
        self.locations_status = 200
        self.locations_payload = {"data": []}
        self.requests = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1/security/oauth2/token", self.token)
        app.router.add_get("/v2/shopping/flight-offers", self.offers)
        app.router.add_get("/v1/reference-data/locations", self.locations)
        return app

    @staticmethod
    def _respond(status, payload) -> web.Response:
        if isinstance(payload, str):
            return web.Response(text=payload, status=status, content_type="application/json")
        return web.Response(text=json.dumps(payload), status=status, content_type="application/json")

    def _record(self, request):
        self.requests.append(
            {
                "path": request.path,
                "query": dict(request.query),
                "authorization": request.headers.get("Authorization"),
            }
        )

    async def token(self, request):
        self.token_calls += 1
        self.token_forms.append(dict(await request.post()))
        if self.token_delay:
            await asyncio.sleep(self.token_delay)
        payload = self.token_payload
        if payload is None:
            payload = {"access_token": f"tok-{self.token_calls}", "expires_in": 1799}
        return self._respond(self.token_status, payload)

    async def offers(self, request):
        self._record(request)
        return self._respond(self.offers_status, self.offers_payload)

    async def locations(self, request):
        self._record(request)
        return self._respond(self.locations_status, self.locations_payload)

    def paths(self):
        return [r["path"] for r in self.requests]


@pytest.fixture
async def amadeus():
    """Démarre un faux serveur Amadeus local."""
    fake = FakeAmadeus()
    server = TestServer(fake.app())
    await server.start_server()
    fake.base_url = f"http://{server.host}:{server.port}"
    yield fake
    await server.close()


@pytest.fixture
def amadeus_config(amadeus):
    return AmadeusConfig(api_key="test-key", api_secret="test-secret", base_url=amadeus.base_url)


@pytest.fixture
async def provider(amadeus_config):
    """Crée un provider Amadeus pointant vers le faux serveur."""
    provider = AmadeusFlightProvider(amadeus_config)
    yield provider
    await provider.close()
