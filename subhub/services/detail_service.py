# subhub/services/detail_service.py
from __future__ import annotations

"""
SubHub SL — Content Detail Resolver
===================================

The record and the viewer's watchlist flag are independent reads, so they run
concurrently. A missing record is terminal: `NotFoundException` (404), never
an empty page. TV shows also carry their episode list.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from subhub.core.auth import Viewer
from subhub.core.exceptions import NotFoundException
from subhub.repositories.content import Collection, ContentRepository
from subhub.repositories.watchlist import WatchlistRepository
from subhub.schemas.content import ContentDetail, ContentItem, EpisodeOut
from subhub.schemas.enums import ContentType

logger = logging.getLogger(__name__)


async def _membership(watchlist: Optional[WatchlistRepository], viewer: Viewer, content_id: UUID) -> bool:
    user_id = viewer.user_uuid
    if watchlist is None or user_id is None:
        return False
    return await watchlist.is_member(user_id, content_id)


async def resolve_detail(
    repo: ContentRepository,
    watchlist: Optional[WatchlistRepository],
    collection: Collection,
    content_id: UUID,
    viewer: Viewer,
    *,
    show_ads: bool = True,
) -> ContentDetail:
    item, in_watchlist = await asyncio.gather(
        repo.get(collection, content_id),
        _membership(watchlist, viewer, content_id),
    )
    if item is None:
        raise NotFoundException(
            "Content not found",
            details={"collection": collection.name, "id": str(content_id)},
        )

    episodes = []
    if item.type == ContentType.TV_SHOW.value:
        episodes = await repo.list_episodes(item.id)

    return ContentDetail(
        item=ContentItem.model_validate(item),
        in_watchlist=in_watchlist,
        episodes=[EpisodeOut.model_validate(e) for e in episodes],
        show_ads=show_ads,
    )


__all__ = ["resolve_detail"]
