# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Watchlist API                                                 ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - POST   /api/watchlist/{section}/{content_id}  → add (idempotent)       ║
# ║  - DELETE /api/watchlist/{section}/{content_id}  → remove (idempotent)    ║
# ║ Anonymous callers are redirected to the login page.                       ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from subhub.api.deps import get_watchlist_repo
from subhub.api.http_utils import require_viewer
from subhub.core.auth import Viewer
from subhub.core.exceptions import NotFoundException
from subhub.repositories.content import COLLECTIONS, Collection
from subhub.repositories.watchlist import WatchlistRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["Watchlist"])


def _collection(section: str) -> Collection:
    collection = COLLECTIONS.get(section)
    if collection is None:
        raise NotFoundException("Unknown section", details={"section": section})
    return collection


def _user_id(viewer: Viewer) -> UUID:
    user_id = viewer.user_uuid
    if user_id is None:
        raise NotFoundException("Unknown user")
    return user_id


@router.post("/{section}/{content_id}")
async def add_to_watchlist(
    section: str = Path(..., max_length=32),
    content_id: UUID = Path(...),
    viewer: Viewer = Depends(require_viewer),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> Dict[str, Any]:
    collection = _collection(section)
    await watchlist.add(_user_id(viewer), content_id, collection=collection.table)
    logger.info("Watchlist add user=%s content=%s", viewer.user_id, content_id)
    return {"content_id": str(content_id), "in_watchlist": True}


@router.delete("/{section}/{content_id}")
async def remove_from_watchlist(
    section: str = Path(..., max_length=32),
    content_id: UUID = Path(...),
    viewer: Viewer = Depends(require_viewer),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> Dict[str, Any]:
    _collection(section)
    await watchlist.remove(_user_id(viewer), content_id)
    logger.info("Watchlist remove user=%s content=%s", viewer.user_id, content_id)
    return {"content_id": str(content_id), "in_watchlist": False}
