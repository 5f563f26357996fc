# subhub/repositories/watchlist.py
from __future__ import annotations

"""
Watchlist membership (user × content item).

- `add` inserts one edge; the `(user_id, movie_id)` unique constraint turns a
  repeated add into a no-op success.
- `remove` deletes whatever matches; removing a missing edge is fine.
- `list_for_user` joins edges to their content tables. Edges whose content
  row is gone fall out of the inner join and are never reported.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import List, Set, Tuple, Type

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subhub.core.exceptions import ContentFetchError
from subhub.db.models.content import ContentMixin
from subhub.db.models.watchlist import WatchlistEntry
from subhub.repositories.content import MODELS_BY_TABLE

logger = logging.getLogger(__name__)


class WatchlistRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    async def is_member(self, user_id: uuid.UUID, content_id: uuid.UUID) -> bool:
        stmt = (
            select(WatchlistEntry.id)
            .where(WatchlistEntry.user_id == user_id, WatchlistEntry.movie_id == content_id)
            .limit(1)
        )
        try:
            async with self._sf() as session:
                return (await session.execute(stmt)).first() is not None
        except SQLAlchemyError as exc:
            raise ContentFetchError("Could not load watchlist") from exc

    async def add(self, user_id: uuid.UUID, content_id: uuid.UUID, *, collection: str = "movies") -> None:
        if collection not in MODELS_BY_TABLE:
            raise ValueError(f"Unknown content table: {collection}")
        async with self._sf() as session:
            session.add(WatchlistEntry(user_id=user_id, movie_id=content_id, collection=collection))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("Watchlist edge already present user=%s content=%s", user_id, content_id)

    async def remove(self, user_id: uuid.UUID, content_id: uuid.UUID) -> None:
        async with self._sf() as session:
            async with session.begin():
                await session.execute(
                    delete(WatchlistEntry).where(
                        WatchlistEntry.user_id == user_id,
                        WatchlistEntry.movie_id == content_id,
                    )
                )

    async def ids_for_user(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        stmt = select(WatchlistEntry.movie_id).where(WatchlistEntry.user_id == user_id)
        try:
            async with self._sf() as session:
                return set((await session.execute(stmt)).scalars().all())
        except SQLAlchemyError as exc:
            raise ContentFetchError("Could not load watchlist") from exc

    async def _edges_into(
        self, user_id: uuid.UUID, table: str, model: Type[ContentMixin]
    ) -> List[Tuple[datetime, str, ContentMixin]]:
        stmt = (
            select(WatchlistEntry.created_at, model)
            .join(model, model.id == WatchlistEntry.movie_id)
            .where(WatchlistEntry.user_id == user_id, WatchlistEntry.collection == table)
        )
        async with self._sf() as session:
            return [(added_at, table, item) for added_at, item in (await session.execute(stmt)).all()]

    async def list_for_user(self, user_id: uuid.UUID) -> List[Tuple[str, ContentMixin]]:
        """(table, item) pairs, most recently added first."""
        try:
            per_table = await asyncio.gather(
                *(self._edges_into(user_id, table, model) for table, model in MODELS_BY_TABLE.items())
            )
        except SQLAlchemyError as exc:
            raise ContentFetchError("Could not load watchlist") from exc
        rows = [row for edges in per_table for row in edges]
        rows.sort(key=lambda r: r[0], reverse=True)
        return [(table, item) for _, table, item in rows]


__all__ = ["WatchlistRepository"]
