# tests/test_access/test_rate_limit.py

import pytest
from httpx import AsyncClient

from subhub.core.limiter import TOO_MANY_REQUESTS, RateLimiter


@pytest.fixture()
def rate_limiter() -> RateLimiter:
    # Overrides the shared fixture so the app under test gets tight limits.
    return RateLimiter(default="5/minute", sensitive="3/minute")


# ─────────────────────────────────────────────────────────────
# Policy
# ─────────────────────────────────────────────────────────────
def test_only_api_paths_are_limited():
    limiter = RateLimiter()
    assert limiter.applies_to("/api/watchlist/movies/1")
    assert not limiter.applies_to("/movies")
    assert not limiter.applies_to("/admin")
    assert not RateLimiter(enabled=False).applies_to("/api/chat")


def test_chat_uses_the_sensitive_tier():
    limiter = RateLimiter(default="100/minute", sensitive="30/minute")
    assert limiter.item_for("/api/chat").amount == 30
    assert limiter.item_for("/api/contact").amount == 100


def test_counters_are_per_client():
    limiter = RateLimiter(default="1/minute")
    assert limiter.hit("/api/contact", "10.0.0.1").allowed
    assert not limiter.hit("/api/contact", "10.0.0.1").allowed
    assert limiter.hit("/api/contact", "10.0.0.2").allowed


def test_reset_clears_all_windows():
    limiter = RateLimiter(default="1/minute")
    limiter.hit("/api/contact", "10.0.0.1")
    limiter.reset()
    assert limiter.hit("/api/contact", "10.0.0.1").allowed


# ─────────────────────────────────────────────────────────────
# Through the app
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_fourth_chat_message_is_rejected(async_client: AsyncClient):
    for _ in range(3):
        res = await async_client.post("/api/chat", json={"message": "hi"})
        assert res.status_code != 429

    res = await async_client.post("/api/chat", json={"message": "hi"})
    assert res.status_code == 429
    assert res.json() == {"error": TOO_MANY_REQUESTS}
    assert res.headers["retry-after"] == "60"


@pytest.mark.anyio
async def test_pages_are_never_limited(async_client: AsyncClient):
    for _ in range(8):
        res = await async_client.get("/movies")
        assert res.status_code == 200


@pytest.mark.anyio
async def test_forwarded_clients_get_their_own_window(async_client: AsyncClient):
    for _ in range(3):
        await async_client.post("/api/chat", json={"message": "hi"}, headers={"X-Forwarded-For": "203.0.113.7"})
    blocked = await async_client.post("/api/chat", json={"message": "hi"}, headers={"X-Forwarded-For": "203.0.113.7"})
    other = await async_client.post("/api/chat", json={"message": "hi"}, headers={"X-Forwarded-For": "203.0.113.8"})

    assert blocked.status_code == 429
    assert other.status_code != 429
