# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Site pages (JSON view models)                                 ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - GET /                       → latest rows of every section             ║
# ║  - GET /{section}              → filtered list + facets                   ║
# ║  - GET /{section}/{id}         → detail (+ watchlist flag, episodes)      ║
# ║  - GET /category/{slug}        → loose category match                     ║
# ║  - GET /language/{slug}        → loose language match                     ║
# ║  - GET /search?q=              → title search across collections          ║
# ║  - GET /my-list                → viewer's watchlist (signed in)           ║
# ║  - GET /admin                  → dashboard counts (admin)                 ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""
Page endpoints. Each returns the view model a template would render; list
pages carry `status` (`ok` / `empty` / `error`) so a store outage never looks
like an empty shelf.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from subhub.api.deps import get_content_repo, get_watchlist_repo
from subhub.api.http_utils import get_viewer, require_admin_page, require_viewer
from subhub.core.auth import Viewer
from subhub.core.exceptions import ContentFetchError
from subhub.middleware.security_headers import set_sensitive_cache
from subhub.repositories.content import COLLECTIONS, SLUG_COLLECTION, Collection, ContentRepository
from subhub.repositories.watchlist import WatchlistRepository
from subhub.schemas.content import ContentDetail, ContentFilters, ContentItem, ContentPage, HomePage, SearchResults
from subhub.schemas.enums import PageStatus
from subhub.schemas.profile import AdminDashboard, MyListPage, WatchlistEntryOut
from subhub.services.catalog_service import load_home, load_section_page, search_catalog
from subhub.services.detail_service import resolve_detail

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])


def content_filters(
    category: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    language: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    sort: Optional[str] = Query(None),
) -> ContentFilters:
    try:
        return ContentFilters(category=category, year=year, language=language, search=search, sort=sort)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


def show_ads(request: Request) -> bool:
    return bool(getattr(request.state, "show_ads", True))


# ─────────────────────────────────────────────────────────────────────────────
# 🏠 Home & search
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/", response_model=HomePage)
async def home(
    request: Request,
    viewer: Viewer = Depends(get_viewer),
    repo: ContentRepository = Depends(get_content_repo),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> HomePage:
    return await load_home(repo, watchlist, viewer, show_ads=show_ads(request))


@router.get("/search", response_model=SearchResults)
async def search(
    request: Request,
    q: str = Query("", max_length=200),
    repo: ContentRepository = Depends(get_content_repo),
) -> SearchResults:
    return await search_catalog(repo, q, show_ads=show_ads(request))


# ─────────────────────────────────────────────────────────────────────────────
# 🏷️ Slug pages
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/category/{slug}", response_model=ContentPage)
async def category_page(
    slug: str,
    request: Request,
    filters: ContentFilters = Depends(content_filters),
    viewer: Viewer = Depends(get_viewer),
    repo: ContentRepository = Depends(get_content_repo),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> ContentPage:
    return await load_section_page(
        repo, watchlist, SLUG_COLLECTION, filters, viewer, category_slug=slug, show_ads=show_ads(request)
    )


@router.get("/language/{slug}", response_model=ContentPage)
async def language_page(
    slug: str,
    request: Request,
    filters: ContentFilters = Depends(content_filters),
    viewer: Viewer = Depends(get_viewer),
    repo: ContentRepository = Depends(get_content_repo),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> ContentPage:
    return await load_section_page(
        repo, watchlist, SLUG_COLLECTION, filters, viewer, language_slug=slug, show_ads=show_ads(request)
    )


# ─────────────────────────────────────────────────────────────────────────────
# 📚 My list & admin dashboard
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/my-list", response_model=MyListPage)
async def my_list(
    request: Request,
    viewer: Viewer = Depends(require_viewer),
    watchlist: WatchlistRepository = Depends(get_watchlist_repo),
) -> MyListPage:
    set_sensitive_cache(request)
    user_id = viewer.user_uuid
    if user_id is None:
        return MyListPage(status=PageStatus.EMPTY, show_ads=show_ads(request))
    try:
        rows = await watchlist.list_for_user(user_id)
    except ContentFetchError as exc:
        return MyListPage(status=PageStatus.ERROR, error=exc.message, show_ads=show_ads(request))
    items = [WatchlistEntryOut(collection=table, item=ContentItem.model_validate(row)) for table, row in rows]
    return MyListPage(
        status=PageStatus.OK if items else PageStatus.EMPTY,
        items=items,
        show_ads=show_ads(request),
    )


@router.get("/admin", response_model=AdminDashboard)
async def admin_dashboard(
    _: Viewer = Depends(require_admin_page),
    repo: ContentRepository = Depends(get_content_repo),
) -> AdminDashboard:
    names = list(COLLECTIONS)
    try:
        totals = await asyncio.gather(*(repo.count(COLLECTIONS[n]) for n in names))
    except ContentFetchError as exc:
        return AdminDashboard(status=PageStatus.ERROR, error=exc.message)
    return AdminDashboard(status=PageStatus.OK, counts=dict(zip(names, totals)))


# ─────────────────────────────────────────────────────────────────────────────
# 🎬 Sections (one parameterized builder per section)
# ─────────────────────────────────────────────────────────────────────────────
def _register_section(collection: Collection) -> None:
    name = collection.name

    async def section_page(
        request: Request,
        filters: ContentFilters = Depends(content_filters),
        viewer: Viewer = Depends(get_viewer),
        repo: ContentRepository = Depends(get_content_repo),
        watchlist: WatchlistRepository = Depends(get_watchlist_repo),
    ) -> ContentPage:
        return await load_section_page(repo, watchlist, collection, filters, viewer, show_ads=show_ads(request))

    async def detail_page(
        content_id: UUID,
        request: Request,
        viewer: Viewer = Depends(get_viewer),
        repo: ContentRepository = Depends(get_content_repo),
        watchlist: WatchlistRepository = Depends(get_watchlist_repo),
    ) -> ContentDetail:
        return await resolve_detail(repo, watchlist, collection, content_id, viewer, show_ads=show_ads(request))

    router.add_api_route(
        f"/{name}", section_page, methods=["GET"], response_model=ContentPage, name=f"{name}_list"
    )
    router.add_api_route(
        f"/{name}/{{content_id}}", detail_page, methods=["GET"], response_model=ContentDetail, name=f"{name}_detail"
    )


for _collection in COLLECTIONS.values():
    _register_section(_collection)


__all__ = ["router", "content_filters"]
