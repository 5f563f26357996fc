# tests/test_catalog/test_detail_resolver.py

import uuid

import pytest
from httpx import AsyncClient

from subhub.core.auth import ANONYMOUS, Viewer
from subhub.core.exceptions import NotFoundException
from subhub.db.models import Movie
from subhub.repositories.content import COLLECTIONS
from subhub.schemas.enums import ViewerRole
from subhub.services.detail_service import resolve_detail


@pytest.mark.anyio
async def test_missing_record_is_terminal_not_found(content_repo, watchlist_repo):
    with pytest.raises(NotFoundException) as exc:
        await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["movies"], uuid.uuid4(), ANONYMOUS)
    assert exc.value.status_code == 404


@pytest.mark.anyio
async def test_watchlist_flag_reflects_membership(content_repo, watchlist_repo, seed):
    (film,) = await seed(Movie, {"title": "Arrival", "year": 2016})
    user_id = uuid.uuid4()
    viewer = Viewer(role=ViewerRole.AUTHENTICATED, user_id=str(user_id))

    before = await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["movies"], film.id, viewer)
    await watchlist_repo.add(user_id, film.id)
    after = await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["movies"], film.id, viewer)

    assert before.item.title == "Arrival"
    assert before.in_watchlist is False
    assert after.in_watchlist is True


@pytest.mark.anyio
async def test_anonymous_viewer_is_never_a_member(content_repo, watchlist_repo, seed):
    (film,) = await seed(Movie, {"title": "Arrival"})
    detail = await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["movies"], film.id, ANONYMOUS)
    assert detail.in_watchlist is False
    assert detail.episodes == []


@pytest.mark.anyio
async def test_tv_show_carries_ordered_episodes(content_repo, watchlist_repo, seed, seed_episodes):
    (show,) = await seed(Movie, {"title": "Dark", "type": "TV Show"})
    await seed_episodes(show.id, (2, 1), (1, 2), (1, 1))

    detail = await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["tv-shows"], show.id, ANONYMOUS)
    assert [(e.season_number, e.episode_number) for e in detail.episodes] == [(1, 1), (1, 2), (2, 1)]


@pytest.mark.anyio
async def test_section_type_is_enforced(content_repo, watchlist_repo, seed):
    (show,) = await seed(Movie, {"title": "Dark", "type": "TV Show"})
    with pytest.raises(NotFoundException):
        await resolve_detail(content_repo, watchlist_repo, COLLECTIONS["movies"], show.id, ANONYMOUS)


@pytest.mark.anyio
async def test_detail_endpoint_404_problem(async_client: AsyncClient):
    res = await async_client.get(f"/movies/{uuid.uuid4()}")
    assert res.status_code == 404
    assert res.headers["content-type"].startswith("application/problem+json")
    assert res.json()["code"] == "not_found"


@pytest.mark.anyio
async def test_detail_endpoint_for_signed_in_viewer(async_client: AsyncClient, seed, watchlist_repo, viewer_auth):
    user_id, headers = viewer_auth
    (film,) = await seed(Movie, {"title": "Her"})
    await watchlist_repo.add(user_id, film.id)

    res = await async_client.get(f"/movies/{film.id}", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["item"]["title"] == "Her"
    assert body["in_watchlist"] is True
