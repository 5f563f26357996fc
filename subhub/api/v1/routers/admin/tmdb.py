# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Admin TMDB lookups                                            ║
# ║  - GET /api/admin/tmdb/search?q=&type=movie|tv                            ║
# ║  - GET /api/admin/tmdb/upcoming?category=&language=                       ║
# ║  - GET /api/admin/tmdb/{type}/{tmdb_id}   → prefilled content fields      ║
# ╚══════════════════════════════════════════════════════════════════════════╝
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from subhub.api.deps import get_tmdb
from subhub.core.exceptions import NotFoundException
from subhub.services.tmdb_service import TMDBClient

router = APIRouter(prefix="/tmdb", tags=["Admin · TMDB"])

Kind = Literal["movie", "tv"]


@router.get("/search")
async def tmdb_search(
    q: str = Query(..., min_length=1, max_length=200),
    type: Kind = Query("movie"),
    tmdb: TMDBClient = Depends(get_tmdb),
) -> Dict[str, Any]:
    results: List[Dict[str, Any]] = await tmdb.search(q, type)
    return {"enabled": tmdb.enabled, "results": results}


@router.get("/upcoming")
async def tmdb_upcoming(
    category: Optional[str] = Query(None),
    language: Optional[str] = Query(None),
    tmdb: TMDBClient = Depends(get_tmdb),
) -> Dict[str, Any]:
    return {"enabled": tmdb.enabled, "results": await tmdb.upcoming(category=category, language=language)}


@router.get("/{type}/{tmdb_id}")
async def tmdb_details(
    type: Kind,
    tmdb_id: int,
    tmdb: TMDBClient = Depends(get_tmdb),
) -> Dict[str, Any]:
    details = await tmdb.details(tmdb_id, type)
    if details is None:
        if not tmdb.enabled:
            return {"enabled": False, "details": None}
        raise NotFoundException("TMDB title not found", details={"tmdb_id": tmdb_id})
    return {"enabled": True, "details": details}
