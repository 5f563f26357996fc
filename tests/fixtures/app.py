# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real app via `create_app()` with a fresh rate limiter and
  upload registry per test
- Points the session-factory dependency at the per-test SQLite database
- Installs an outbound httpx client that refuses every request, so no test
  talks to Resend / TMDB / Google by accident
"""

from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from subhub.core.limiter import RateLimiter
from subhub.db.session import get_session_factory
from subhub.main import create_app
from subhub.services.drive.uploads import UploadRegistry
from tests.fixtures.mocks.http import refuse


@pytest.fixture()
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture()
def upload_registry() -> UploadRegistry:
    return UploadRegistry()


@pytest.fixture()
async def app(session_factory, rate_limiter, upload_registry) -> AsyncGenerator[FastAPI, None]:
    application = create_app(rate_limiter=rate_limiter, upload_registry=upload_registry)
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    offline = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    application.state.http_client = offline
    yield application
    await offline.aclose()


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """🌐 HTTP client bound to the test app (redirects are NOT followed)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
