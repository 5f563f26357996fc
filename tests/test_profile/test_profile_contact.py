# tests/test_profile/test_profile_contact.py

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from subhub.db.models.contact_message import ContactMessage


# ─────────────────────────────────────────────────────────────
# Contact form
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_contact_message_is_stored(async_client: AsyncClient, session_factory):
    res = await async_client.post(
        "/api/contact",
        json={"name": "Nimal", "email": "nimal@example.com", "subject": "Request", "message": "Please add Moving."},
    )

    assert res.status_code == 201
    assert "id" in res.json()
    async with session_factory() as session:
        rows = (await session.execute(select(ContactMessage))).scalars().all()
    assert [(r.name, r.email, r.message) for r in rows] == [("Nimal", "nimal@example.com", "Please add Moving.")]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Nimal", "email": "not-an-email", "message": "hi"},
        {"name": "", "email": "nimal@example.com", "message": "hi"},
        {"name": "Nimal", "email": "nimal@example.com", "message": ""},
    ],
)
async def test_contact_rejects_bad_input(async_client: AsyncClient, payload):
    res = await async_client.post("/api/contact", json=payload)
    assert res.status_code == 422


# ─────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_profile_defaults_to_session_identity(async_client: AsyncClient, viewer_auth):
    user_id, headers = viewer_auth
    res = await async_client.get("/profile", headers=headers)

    assert res.status_code == 200
    assert res.json() == {
        "user_id": str(user_id),
        "email": "viewer@subhub.test",
        "full_name": None,
        "avatar_url": None,
        "updated_at": None,
    }
    assert res.headers["cache-control"] == "no-store"


@pytest.mark.anyio
async def test_profile_update_is_an_upsert(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth

    first = await async_client.post("/profile", json={"full_name": "  Nimal Perera "}, headers=headers)
    second = await async_client.post(
        "/profile", json={"full_name": "Nimal", "avatar_url": "https://cdn.test/a.png"}, headers=headers
    )
    assert first.status_code == second.status_code == 200
    assert first.json()["full_name"] == "Nimal Perera"

    current = (await async_client.get("/profile", headers=headers)).json()
    assert current["full_name"] == "Nimal"
    assert current["avatar_url"] == "https://cdn.test/a.png"


@pytest.mark.anyio
async def test_profiles_are_per_viewer(async_client: AsyncClient, viewer_auth, admin_auth):
    _, viewer_headers = viewer_auth
    _, admin_headers = admin_auth
    await async_client.post("/profile", json={"full_name": "Viewer"}, headers=viewer_headers)

    res = await async_client.get("/profile", headers=admin_headers)
    assert res.json()["full_name"] is None
