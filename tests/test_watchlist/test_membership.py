# tests/test_watchlist/test_membership.py

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from subhub.core.exceptions import ContentFetchError
from subhub.db.models import KoreanDrama, Movie, SinhalaMovie, WatchlistEntry
from subhub.repositories.watchlist import WatchlistRepository


async def edge_count(session_factory, user_id) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(WatchlistEntry).where(WatchlistEntry.user_id == user_id)
        return (await session.execute(stmt)).scalar_one()


@pytest.mark.anyio
async def test_add_is_idempotent(watchlist_repo: WatchlistRepository, session_factory, seed):
    (film,) = await seed(Movie, {"title": "Dune"})
    user_id = uuid.uuid4()

    await watchlist_repo.add(user_id, film.id)
    await watchlist_repo.add(user_id, film.id)

    assert await watchlist_repo.is_member(user_id, film.id) is True
    assert await edge_count(session_factory, user_id) == 1


@pytest.mark.anyio
async def test_remove_is_idempotent(watchlist_repo: WatchlistRepository, seed):
    (film,) = await seed(Movie, {"title": "Dune"})
    user_id = uuid.uuid4()
    await watchlist_repo.add(user_id, film.id)

    await watchlist_repo.remove(user_id, film.id)
    await watchlist_repo.remove(user_id, film.id)

    assert await watchlist_repo.is_member(user_id, film.id) is False


@pytest.mark.anyio
async def test_membership_is_per_user(watchlist_repo: WatchlistRepository, seed):
    (film,) = await seed(Movie, {"title": "Dune"})
    alice, bob = uuid.uuid4(), uuid.uuid4()
    await watchlist_repo.add(alice, film.id)

    assert await watchlist_repo.is_member(alice, film.id) is True
    assert await watchlist_repo.is_member(bob, film.id) is False
    assert await watchlist_repo.ids_for_user(alice) == {film.id}
    assert await watchlist_repo.ids_for_user(bob) == set()


@pytest.mark.anyio
async def test_list_for_user_spans_tables_and_drops_dangling_edges(watchlist_repo: WatchlistRepository, seed):
    (film,) = await seed(Movie, {"title": "Dune"})
    (local,) = await seed(SinhalaMovie, {"title": "Gamperaliya"})
    user_id = uuid.uuid4()

    await watchlist_repo.add(user_id, film.id)
    await watchlist_repo.add(user_id, local.id, collection="sinhala_movies")
    await watchlist_repo.add(user_id, uuid.uuid4())  # content row never existed

    listed = await watchlist_repo.list_for_user(user_id)
    assert sorted((table, item.title) for table, item in listed) == [
        ("movies", "Dune"),
        ("sinhala_movies", "Gamperaliya"),
    ]


@pytest.mark.anyio
async def test_list_for_user_merges_tables_most_recent_first(watchlist_repo: WatchlistRepository, session_factory, seed):
    (film,) = await seed(Movie, {"title": "Dune"})
    (local,) = await seed(SinhalaMovie, {"title": "Gamperaliya"})
    (drama,) = await seed(KoreanDrama, {"title": "Moving"})
    user_id = uuid.uuid4()
    added = datetime(2026, 3, 1, tzinfo=timezone.utc)
    async with session_factory() as session:
        for minutes, (table, item) in enumerate([("korean_dramas", drama), ("movies", film), ("sinhala_movies", local)]):
            session.add(
                WatchlistEntry(
                    user_id=user_id, movie_id=item.id, collection=table, created_at=added + timedelta(minutes=minutes)
                )
            )
        await session.commit()

    listed = await watchlist_repo.list_for_user(user_id)
    assert [(table, item.title) for table, item in listed] == [
        ("sinhala_movies", "Gamperaliya"),
        ("movies", "Dune"),
        ("korean_dramas", "Moving"),
    ]


@pytest.mark.anyio
async def test_unknown_collection_is_rejected(watchlist_repo: WatchlistRepository):
    with pytest.raises(ValueError):
        await watchlist_repo.add(uuid.uuid4(), uuid.uuid4(), collection="podcasts")


@pytest.mark.anyio
async def test_store_failure_surfaces_as_fetch_error(broken_session_factory):
    repo = WatchlistRepository(broken_session_factory)
    with pytest.raises(ContentFetchError):
        await repo.list_for_user(uuid.uuid4())
    with pytest.raises(ContentFetchError):
        await repo.is_member(uuid.uuid4(), uuid.uuid4())
