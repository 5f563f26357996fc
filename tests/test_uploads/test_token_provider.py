# tests/test_uploads/test_token_provider.py

from urllib.parse import parse_qs, urlparse

import pytest

from subhub.core.cache import TTLMap
from subhub.core.exceptions import DriveAuthRequired, UpstreamError
from subhub.services.drive.auth import DriveTokenProvider
from tests.fixtures.mocks.drive import FakeDrive


def provider(drive: FakeDrive, *, refresh: bool = True, cache: TTLMap | None = None) -> DriveTokenProvider:
    creds = (
        {"client_id": "client-1", "client_secret": "shh", "refresh_token": "1//refresh"}
        if refresh
        else {"client_id": "client-1", "client_secret": "shh", "refresh_token": ""}
    )
    return DriveTokenProvider(
        drive.http, cache=cache, redirect_uri="https://subhub.test/api/admin/drive/callback", **creds
    )


# ─────────────────────────────────────────────────────────────
# Resolution order
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_server_refresh_wins_over_cached_token(fake_drive: FakeDrive):
    tokens = provider(fake_drive)
    tokens.remember("owner-1", "ya29.cached")

    assert await tokens.get_token("owner-1") == "ya29.refreshed"
    form = parse_qs(fake_drive.requests[0].content.decode())
    assert form["grant_type"] == ["refresh_token"]
    assert form["refresh_token"] == ["1//refresh"]


@pytest.mark.anyio
async def test_failed_refresh_falls_back_to_cache(fake_drive: FakeDrive):
    fake_drive.token_status = 400
    fake_drive.token_body = {"error": "invalid_grant"}
    tokens = provider(fake_drive)
    tokens.remember("owner-1", "ya29.cached")

    assert await tokens.get_token("owner-1") == "ya29.cached"


@pytest.mark.anyio
async def test_nothing_usable_requires_consent(fake_drive: FakeDrive):
    tokens = provider(fake_drive, refresh=False)

    with pytest.raises(DriveAuthRequired) as exc:
        await tokens.get_token("owner-1")

    assert exc.value.status_code == 401
    query = parse_qs(urlparse(exc.value.consent_url).query)
    assert query["state"] == ["owner-1"]
    assert query["client_id"] == ["client-1"]
    assert query["access_type"] == ["offline"]
    assert fake_drive.requests == []


@pytest.mark.anyio
async def test_cached_token_expires(fake_drive: FakeDrive):
    now = {"t": 0.0}
    tokens = provider(fake_drive, refresh=False, cache=TTLMap(clock=lambda: now["t"]))
    tokens.remember("owner-1", "ya29.short", expires_in=120)

    now["t"] = 119
    assert await tokens.get_token("owner-1") == "ya29.short"
    now["t"] = 121
    with pytest.raises(DriveAuthRequired):
        await tokens.get_token("owner-1")


@pytest.mark.anyio
async def test_remember_never_exceeds_configured_ttl(fake_drive: FakeDrive):
    now = {"t": 0.0}
    tokens = provider(fake_drive, refresh=False, cache=TTLMap(clock=lambda: now["t"]))
    tokens.ttl_seconds = 3600
    tokens.remember("owner-1", "ya29.long", expires_in=10**6)

    now["t"] = 3601
    assert tokens.sweep() == 1


@pytest.mark.anyio
async def test_zero_ttl_keeps_nothing(fake_drive: FakeDrive):
    now = {"t": 0.0}
    tokens = DriveTokenProvider(
        fake_drive.http, cache=TTLMap(clock=lambda: now["t"]), client_id="client-1", refresh_token="", ttl_seconds=0
    )
    tokens.remember("owner-1", "ya29.short", expires_in=3599)

    assert tokens.ttl_seconds == 0
    with pytest.raises(DriveAuthRequired):
        await tokens.get_token("owner-1")


# ─────────────────────────────────────────────────────────────
# Consent flow
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_exchange_code_caches_the_token(fake_drive: FakeDrive):
    fake_drive.token_body = {"access_token": "ya29.consented", "expires_in": 3599}
    tokens = provider(fake_drive, refresh=False)

    assert await tokens.exchange_code("4/code", "owner-1") == "ya29.consented"
    form = parse_qs(fake_drive.requests[0].content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["4/code"]
    assert await tokens.get_token("owner-1") == "ya29.consented"


@pytest.mark.anyio
async def test_exchange_code_failure_is_upstream_error(fake_drive: FakeDrive):
    fake_drive.token_status = 400
    fake_drive.token_body = {"error": "invalid_grant", "error_description": "Bad Request"}
    tokens = provider(fake_drive, refresh=False)

    with pytest.raises(UpstreamError) as exc:
        await tokens.exchange_code("4/stale", "owner-1")
    assert exc.value.status_code == 502
    assert "Bad Request" in exc.value.message
