# subhub/repositories/external_updates.py
from __future__ import annotations

"""
Seen-log for the external update monitor.

Rows are only ever appended. A unique violation on `guid` means another run
recorded the same item first, which is the outcome we wanted anyway.
"""

import logging
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subhub.db.models.external_update import ExternalUpdate

logger = logging.getLogger(__name__)


class SeenLog(Protocol):
    async def has_seen(self, guid: str) -> bool: ...

    async def record(self, *, site_name: str, guid: str, title: Optional[str], link: Optional[str]) -> None: ...


class ExternalUpdateRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    async def has_seen(self, guid: str) -> bool:
        async with self._sf() as session:
            stmt = select(ExternalUpdate.id).where(ExternalUpdate.guid == guid).limit(1)
            return (await session.execute(stmt)).first() is not None

    async def record(self, *, site_name: str, guid: str, title: Optional[str], link: Optional[str]) -> None:
        async with self._sf() as session:
            session.add(ExternalUpdate(site_name=site_name, guid=guid, title=title, link=link))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info("Seen-log already holds %s", guid)


__all__ = ["SeenLog", "ExternalUpdateRepository"]
