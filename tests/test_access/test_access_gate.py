# tests/test_access/test_access_gate.py

import pytest
from httpx import AsyncClient

from subhub.core.auth import ANONYMOUS, Viewer, classify_claims, is_admin_email
from subhub.middleware.access_gate import redirect_target
from subhub.schemas.enums import ViewerRole
from tests.fixtures.auth import ADMIN_EMAIL, bearer, make_token

VIEWER = Viewer(role=ViewerRole.AUTHENTICATED, user_id="u-1", email="viewer@subhub.test")
ADMIN = Viewer(role=ViewerRole.ADMIN, user_id="u-2", email=ADMIN_EMAIL)


# ─────────────────────────────────────────────────────────────
# Redirect rules
# ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "path, viewer, expected",
    [
        ("/my-list", ANONYMOUS, "/login"),
        ("/profile", ANONYMOUS, "/login"),
        ("/profile/settings", ANONYMOUS, "/login"),
        ("/admin", ANONYMOUS, "/login"),
        ("/admin/uploads", ANONYMOUS, "/login"),
        ("/admin", VIEWER, "/"),
        ("/admin", ADMIN, None),
        ("/my-list", VIEWER, None),
        ("/movies", ANONYMOUS, None),
        ("/", ANONYMOUS, None),
        ("/api/admin/content/movies", ANONYMOUS, None),
    ],
)
def test_redirect_target(path, viewer, expected):
    assert redirect_target(path, viewer) == expected


def test_admin_allow_list_is_case_insensitive():
    assert is_admin_email("Admin@SubHub.test", ["admin@subhub.test"])
    assert not is_admin_email("someone@subhub.test", ["admin@subhub.test"])
    assert not is_admin_email(None, ["admin@subhub.test"])


def test_claims_without_subject_are_anonymous():
    assert classify_claims({"email": ADMIN_EMAIL}) is ANONYMOUS
    assert classify_claims({"sub": "u-9", "email": ADMIN_EMAIL}).is_admin


# ─────────────────────────────────────────────────────────────
# Through the app
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/my-list", "/profile", "/admin"])
async def test_anonymous_is_sent_to_login(async_client: AsyncClient, path):
    res = await async_client.get(path)
    assert res.status_code == 307
    assert res.headers["location"] == "/login"


@pytest.mark.anyio
async def test_non_admin_is_sent_home(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth
    res = await async_client.get("/admin", headers=headers)
    assert res.status_code == 307
    assert res.headers["location"] == "/"


@pytest.mark.anyio
async def test_admin_dashboard_has_no_ads(async_client: AsyncClient, admin_auth):
    _, headers = admin_auth
    res = await async_client.get("/admin", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["show_ads"] is False
    assert body["counts"] == {"movies": 0, "tv-shows": 0, "korean-dramas": 0, "sinhala-movies": 0}


@pytest.mark.anyio
async def test_public_pages_show_ads(async_client: AsyncClient):
    res = await async_client.get("/movies")
    assert res.status_code == 200
    assert res.json()["show_ads"] is True


@pytest.mark.anyio
async def test_expired_session_counts_as_anonymous(async_client: AsyncClient):
    token = make_token(email=ADMIN_EMAIL, expires_in=-60)
    res = await async_client.get("/admin", headers=bearer(token))
    assert res.status_code == 307
    assert res.headers["location"] == "/login"


@pytest.mark.anyio
async def test_token_signed_with_another_secret_is_ignored(async_client: AsyncClient):
    token = make_token(email=ADMIN_EMAIL, secret="not-the-project-secret-0123456789")
    res = await async_client.get("/my-list", headers=bearer(token))
    assert res.status_code == 307


@pytest.mark.anyio
async def test_session_cookie_is_accepted(async_client: AsyncClient):
    token = make_token(email=ADMIN_EMAIL)
    res = await async_client.get("/admin", headers={"Cookie": f"sb-access-token={token}"})
    assert res.status_code == 200


# ─────────────────────────────────────────────────────────────
# Admin APIs answer with errors, not redirects
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_admin_api_anonymous_is_401(async_client: AsyncClient):
    res = await async_client.get("/api/admin/tmdb/search", params={"q": "dune"})
    assert res.status_code == 401
    assert res.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
async def test_admin_api_non_admin_is_403(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth
    res = await async_client.get("/api/admin/tmdb/search", params={"q": "dune"}, headers=headers)
    assert res.status_code == 403
    assert res.json()["code"] == "forbidden"
