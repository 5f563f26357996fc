# subhub/services/catalog_service.py
from __future__ import annotations

"""
SubHub SL — Catalog pages
=========================

Assembles the JSON view models behind the list pages:

- `load_section_page()` → items + facets (+ the viewer's watchlist ids),
  fetched concurrently, for a section or a category/language slug page
- `load_home()`         → latest rows of every section, fetched concurrently
- `search_catalog()`    → title search across all collections

A store failure never looks like an empty shelf: it yields
`status="error"` with a message, while "nothing matched" is `status="empty"`.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Set
from uuid import UUID

from subhub.core.auth import Viewer
from subhub.core.exceptions import ContentFetchError
from subhub.repositories.content import COLLECTIONS, Collection, ContentRepository
from subhub.repositories.watchlist import WatchlistRepository
from subhub.schemas.content import (
    ContentFilters,
    ContentItem,
    ContentPage,
    Facets,
    HomePage,
    SearchResults,
)
from subhub.schemas.enums import PageStatus

logger = logging.getLogger(__name__)

HOME_ROW_SIZE = 12


async def _watchlist_ids(watchlist: Optional[WatchlistRepository], viewer: Viewer) -> Set[UUID]:
    user_id = viewer.user_uuid
    if watchlist is None or user_id is None:
        return set()
    return await watchlist.ids_for_user(user_id)


async def load_section_page(
    repo: ContentRepository,
    watchlist: Optional[WatchlistRepository],
    collection: Collection,
    filters: ContentFilters,
    viewer: Viewer,
    *,
    category_slug: Optional[str] = None,
    language_slug: Optional[str] = None,
    show_ads: bool = True,
) -> ContentPage:
    """One list page: items, facet lists and watchlist membership in parallel."""
    try:
        items, facets, ids = await asyncio.gather(
            repo.list_items(collection, filters, category_slug=category_slug, language_slug=language_slug),
            repo.facet_values(collection),
            _watchlist_ids(watchlist, viewer),
        )
    except ContentFetchError as exc:
        logger.warning("Section %s unavailable: %s", collection.name, exc.message)
        return ContentPage(
            section=collection.name,
            status=PageStatus.ERROR,
            filters=filters,
            facets=Facets(),
            error=exc.message,
            show_ads=show_ads,
        )

    return ContentPage(
        section=collection.name,
        status=PageStatus.OK if items else PageStatus.EMPTY,
        items=[ContentItem.model_validate(i) for i in items],
        facets=facets,
        filters=filters,
        watchlist_ids=sorted(ids, key=str),
        show_ads=show_ads,
    )


async def load_home(
    repo: ContentRepository,
    watchlist: Optional[WatchlistRepository],
    viewer: Viewer,
    *,
    row_size: int = HOME_ROW_SIZE,
    show_ads: bool = True,
) -> HomePage:
    names = list(COLLECTIONS)
    latest = ContentFilters()
    try:
        *rows, ids = await asyncio.gather(
            *(repo.list_items(COLLECTIONS[n], latest, limit=row_size) for n in names),
            _watchlist_ids(watchlist, viewer),
        )
    except ContentFetchError as exc:
        logger.warning("Home page unavailable: %s", exc.message)
        return HomePage(status=PageStatus.ERROR, error=exc.message, show_ads=show_ads)

    sections: Dict[str, List[ContentItem]] = {
        name: [ContentItem.model_validate(i) for i in items] for name, items in zip(names, rows)
    }
    any_items = any(sections.values())
    return HomePage(
        status=PageStatus.OK if any_items else PageStatus.EMPTY,
        sections=sections,
        watchlist_ids=sorted(ids, key=str),
        show_ads=show_ads,
    )


async def search_catalog(repo: ContentRepository, query: str, *, show_ads: bool = True) -> SearchResults:
    term = (query or "").strip()
    if not term:
        return SearchResults(query=term, status=PageStatus.EMPTY, show_ads=show_ads)
    try:
        items = await repo.search_all(term)
    except ContentFetchError as exc:
        return SearchResults(query=term, status=PageStatus.ERROR, error=exc.message, show_ads=show_ads)
    return SearchResults(
        query=term,
        status=PageStatus.OK if items else PageStatus.EMPTY,
        items=[ContentItem.model_validate(i) for i in items],
        show_ads=show_ads,
    )


__all__ = ["load_section_page", "load_home", "search_catalog", "HOME_ROW_SIZE"]
