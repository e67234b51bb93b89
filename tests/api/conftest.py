"""API test fixtures: an httpx.AsyncClient against the full FastAPI app.

The prediction service dependency is overridden with a fresh instance per
test whose feed client points at a pytest-httpx mocked upstream, so every
request runs a real cycle without touching the network.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from drawcast.feed.client import DrawFeedClient
from drawcast.main import app
from drawcast.prediction.ensemble import EnsemblePredictor
from drawcast.prediction.service import PredictionService, get_prediction_service

FEED_URL = "https://feed.test/WinGo/WinGo_1M/GetHistoryIssuePage.json"


@pytest.fixture
def service(predictor: EnsemblePredictor) -> PredictionService:
    """Service with caching disabled so each request hits the mocked feed."""
    feed = DrawFeedClient(FEED_URL, cache_ttl=0)
    return PredictionService(feed=feed, predictor=predictor)


@pytest_asyncio.fixture
async def client(service: PredictionService) -> AsyncClient:
    """Provide an httpx.AsyncClient wired to the app with the test service."""
    app.dependency_overrides[get_prediction_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
