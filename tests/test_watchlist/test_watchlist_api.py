# tests/test_watchlist/test_watchlist_api.py

import uuid

import pytest
from httpx import AsyncClient

from subhub.db.models import Movie

BASE = "/api/watchlist"


@pytest.mark.anyio
async def test_anonymous_add_redirects_to_login(async_client: AsyncClient):
    res = await async_client.post(f"{BASE}/movies/{uuid.uuid4()}")
    assert res.status_code == 303
    assert res.headers["location"] == "/login"


@pytest.mark.anyio
async def test_add_then_remove_round_trip(async_client: AsyncClient, seed, watchlist_repo, viewer_auth):
    user_id, headers = viewer_auth
    (film,) = await seed(Movie, {"title": "Dune"})

    first = await async_client.post(f"{BASE}/movies/{film.id}", headers=headers)
    again = await async_client.post(f"{BASE}/movies/{film.id}", headers=headers)
    assert first.status_code == again.status_code == 200
    assert first.json() == {"content_id": str(film.id), "in_watchlist": True}
    assert await watchlist_repo.is_member(user_id, film.id)

    removed = await async_client.delete(f"{BASE}/movies/{film.id}", headers=headers)
    removed_again = await async_client.delete(f"{BASE}/movies/{film.id}", headers=headers)
    assert removed.status_code == removed_again.status_code == 200
    assert removed.json()["in_watchlist"] is False
    assert not await watchlist_repo.is_member(user_id, film.id)


@pytest.mark.anyio
async def test_unknown_section_is_404(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth
    res = await async_client.post(f"{BASE}/podcasts/{uuid.uuid4()}", headers=headers)
    assert res.status_code == 404


@pytest.mark.anyio
async def test_my_list_requires_sign_in(async_client: AsyncClient):
    res = await async_client.get("/my-list")
    assert res.status_code == 307
    assert res.headers["location"] == "/login"


@pytest.mark.anyio
async def test_my_list_shows_live_items_only(async_client: AsyncClient, seed, watchlist_repo, viewer_auth):
    user_id, headers = viewer_auth
    (film,) = await seed(Movie, {"title": "Dune"})
    await watchlist_repo.add(user_id, film.id)
    await watchlist_repo.add(user_id, uuid.uuid4())

    res = await async_client.get("/my-list", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert [(e["collection"], e["item"]["title"]) for e in body["items"]] == [("movies", "Dune")]
    assert res.headers["cache-control"] == "no-store"


@pytest.mark.anyio
async def test_my_list_empty(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth
    res = await async_client.get("/my-list", headers=headers)
    assert res.status_code == 200
    assert res.json()["status"] == "empty"
