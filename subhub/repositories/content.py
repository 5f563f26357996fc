# subhub/repositories/content.py
from __future__ import annotations

"""
# SubHub SL — Content repository & filter query builder

Every list page (movies, TV shows, Korean dramas, Sinhala movies, category and
language slug pages) goes through one parameterized builder:

    filters {category, year, language, search, sort}
        → SELECT … WHERE … ORDER BY … LIMIT <section page size>

Rules
-----
- `category` / `year` / `language`: exact match when set and not "All".
- `search`: case-insensitive substring on `title`.
- Slug pages (`/category/action-adventure`): the slug is title-cased word by
  word ("Action Adventure") and matched as a case-insensitive *substring* of
  the stored value, so composite categories like "Action, Adventure" match.
- Sort: latest (default) → created desc · old → created asc ·
  rating → rating desc · year → year desc. NULLs sort last.

Facets are read from a bounded sample (500 rows by default): "All" first,
no duplicates or blanks, years descending numerically, other fields in
encounter order.

Store failures raise `ContentFetchError`; an empty result is just `[]`.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subhub.core.exceptions import ContentFetchError
from subhub.db.models.content import ContentMixin, KoreanDrama, Movie, SinhalaMovie, TVEpisode
from subhub.schemas.content import ALL, ContentFilters, Facets
from subhub.schemas.enums import ContentType, SortKey

logger = logging.getLogger(__name__)

FACET_SAMPLE_SIZE = 500
FACET_FIELDS: Tuple[str, ...] = ("category", "year", "language")


# ─────────────────────────────────────────────────────────────────────────────
# 🗂️ Collections
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Collection:
    """A browsable section: which table, which type rows, and how many per page."""

    name: str
    model: Type[ContentMixin]
    page_size: int
    content_type: Optional[ContentType] = None
    fixed_languages: Optional[Tuple[str, ...]] = None
    facet_sample: Optional[int] = FACET_SAMPLE_SIZE

    @property
    def table(self) -> str:
        return self.model.__tablename__

    @property
    def default_type(self) -> ContentType:
        if self.content_type is not None:
            return self.content_type
        return TABLE_DEFAULT_TYPES[self.table]


TABLE_DEFAULT_TYPES: Dict[str, ContentType] = {
    "movies": ContentType.MOVIE,
    "sinhala_movies": ContentType.SINHALA_MOVIE,
    "korean_dramas": ContentType.KOREAN_DRAMA,
}

COLLECTIONS: Dict[str, Collection] = {
    "movies": Collection("movies", Movie, 100, ContentType.MOVIE),
    "tv-shows": Collection("tv-shows", Movie, 100, ContentType.TV_SHOW),
    "korean-dramas": Collection("korean-dramas", KoreanDrama, 48, fixed_languages=("Korean",)),
    "sinhala-movies": Collection("sinhala-movies", SinhalaMovie, 50, fixed_languages=("Sinhala",)),
}

# Slug pages read the shared movies table regardless of type.
SLUG_COLLECTION = Collection("movies-all", Movie, 100)

MODELS_BY_TABLE: Dict[str, Type[ContentMixin]] = {
    "movies": Movie,
    "sinhala_movies": SinhalaMovie,
    "korean_dramas": KoreanDrama,
}


# ─────────────────────────────────────────────────────────────────────────────
# 🧮 Query building (pure)
# ─────────────────────────────────────────────────────────────────────────────
def slug_to_label(slug: str) -> str:
    """`action-adventure` → `Action Adventure` (first letter of each word upper-cased)."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def _order_by(model: Type[ContentMixin], sort: SortKey) -> List[Any]:
    if sort is SortKey.OLD:
        return [model.created_at.asc(), model.id.asc()]
    if sort is SortKey.RATING:
        return [model.rating.desc().nulls_last(), model.created_at.desc()]
    if sort is SortKey.YEAR:
        return [model.year.desc().nulls_last(), model.created_at.desc()]
    return [model.created_at.desc(), model.id.desc()]


def build_list_query(
    collection: Collection,
    filters: ContentFilters,
    *,
    category_slug: Optional[str] = None,
    language_slug: Optional[str] = None,
    limit: Optional[int] = None,
) -> Select:
    """Translate filters into a bounded, ordered SELECT for `collection`."""
    model = collection.model
    stmt = select(model)

    if collection.content_type is not None:
        stmt = stmt.where(model.type == collection.content_type.value)

    if category_slug:
        stmt = stmt.where(model.category.icontains(slug_to_label(category_slug), autoescape=True))
    elif filters.category:
        stmt = stmt.where(model.category == filters.category)

    if language_slug:
        stmt = stmt.where(model.language.icontains(slug_to_label(language_slug), autoescape=True))
    elif filters.language:
        stmt = stmt.where(model.language == filters.language)

    if filters.year is not None:
        stmt = stmt.where(model.year == filters.year)

    if filters.search:
        stmt = stmt.where(model.title.icontains(filters.search, autoescape=True))

    page_size = min(limit or collection.page_size, collection.page_size)
    return stmt.order_by(*_order_by(model, filters.sort)).limit(page_size)


def build_facet_query(collection: Collection, fields: Sequence[str] = FACET_FIELDS) -> Select:
    model = collection.model
    stmt = select(*(getattr(model, f) for f in fields))
    if collection.content_type is not None:
        stmt = stmt.where(model.type == collection.content_type.value)
    if collection.facet_sample:
        stmt = stmt.limit(collection.facet_sample)
    return stmt


def distinct_values(values: Iterable[Any], *, numeric_desc: bool = False) -> List[str]:
    """`["All", …]` with blanks and duplicates removed."""
    seen: Dict[str, Any] = {}
    for v in values:
        if v is None:
            continue
        key = str(v).strip()
        if not key or key == ALL or key in seen:
            continue
        seen[key] = v
    keys = list(seen)
    if numeric_desc:
        keys.sort(key=lambda k: _numeric(k), reverse=True)
    return [ALL, *keys]


def _numeric(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return float("-inf")


def facets_from_rows(
    rows: Iterable[Sequence[Any]],
    fields: Sequence[str] = FACET_FIELDS,
    *,
    fixed_languages: Optional[Sequence[str]] = None,
) -> Facets:
    columns: Dict[str, List[Any]] = {f: [] for f in fields}
    for row in rows:
        for field, value in zip(fields, row):
            columns[field].append(value)
    out = Facets(
        categories=distinct_values(columns.get("category", [])),
        years=distinct_values(columns.get("year", []), numeric_desc=True),
        languages=distinct_values(columns.get("language", [])),
    )
    if fixed_languages is not None:
        out.languages = [ALL, *fixed_languages]
    return out


# ─────────────────────────────────────────────────────────────────────────────
# 🗄️ Repository
# ─────────────────────────────────────────────────────────────────────────────
class ContentRepository:
    """Async reads/writes over the content collections.

    Takes a session *factory* so independent reads can run concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    @asynccontextmanager
    async def _reading(self, what: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sf() as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Content fetch failed (%s): %s", what, exc)
            raise ContentFetchError(f"Could not load {what}", details={"reason": type(exc).__name__}) from exc

    # ── Lists & facets ──────────────────────────────────────────────────────
    async def list_items(
        self,
        collection: Collection,
        filters: ContentFilters,
        *,
        category_slug: Optional[str] = None,
        language_slug: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ContentMixin]:
        stmt = build_list_query(
            collection, filters, category_slug=category_slug, language_slug=language_slug, limit=limit
        )
        async with self._reading(collection.name) as session:
            return list((await session.execute(stmt)).scalars().all())

    async def facet_values(
        self, collection: Collection, fields: Sequence[str] = FACET_FIELDS
    ) -> Facets:
        stmt = build_facet_query(collection, fields)
        async with self._reading(f"{collection.name} filters") as session:
            rows = (await session.execute(stmt)).all()
        return facets_from_rows(rows, fields, fixed_languages=collection.fixed_languages)

    async def search_all(self, term: str, *, limit: int = 20) -> List[ContentMixin]:
        """Title search across every table (`limit` per table), merged newest first."""
        filters = ContentFilters(search=term)
        per_table = await asyncio.gather(
            *(
                self.list_items(Collection(model.__tablename__, model, limit), filters)
                for model in MODELS_BY_TABLE.values()
            )
        )
        merged = [item for rows in per_table for item in rows]
        merged.sort(key=lambda item: item.created_at, reverse=True)
        return merged

    async def count(self, collection: Collection) -> int:
        model = collection.model
        stmt = select(func.count()).select_from(model)
        if collection.content_type is not None:
            stmt = stmt.where(model.type == collection.content_type.value)
        async with self._reading(f"{collection.name} count") as session:
            return int((await session.execute(stmt)).scalar_one())

    # ── Single records ──────────────────────────────────────────────────────
    async def get(self, collection: Collection, content_id: uuid.UUID) -> Optional[ContentMixin]:
        model = collection.model
        stmt = select(model).where(model.id == content_id)
        if collection.content_type is not None:
            stmt = stmt.where(model.type == collection.content_type.value)
        async with self._reading(f"{collection.name} item") as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    async def list_episodes(self, show_id: uuid.UUID) -> List[TVEpisode]:
        stmt = (
            select(TVEpisode)
            .where(TVEpisode.show_id == show_id)
            .order_by(TVEpisode.season_number.asc(), TVEpisode.episode_number.asc())
        )
        async with self._reading("episodes") as session:
            return list((await session.execute(stmt)).scalars().all())

    # ── Admin writes ────────────────────────────────────────────────────────
    async def create(self, collection: Collection, data: Dict[str, Any]) -> ContentMixin:
        payload = dict(data)
        payload["type"] = _type_value(payload.get("type")) or collection.default_type.value
        row = collection.model(**payload)
        async with self._sf() as session:
            async with session.begin():
                session.add(row)
            await session.refresh(row)
        return row

    async def update(
        self, collection: Collection, content_id: uuid.UUID, data: Dict[str, Any]
    ) -> Optional[ContentMixin]:
        async with self._sf() as session:
            async with session.begin():
                row = await session.get(collection.model, content_id)
                if row is None:
                    return None
                for key, value in data.items():
                    if key == "type":
                        value = _type_value(value) or row.type
                    setattr(row, key, value)
            await session.refresh(row)
        return row

    async def set_video_url(self, table: str, content_id: uuid.UUID, url: str) -> bool:
        model = MODELS_BY_TABLE[table]
        async with self._sf() as session:
            async with session.begin():
                row = await session.get(model, content_id)
                if row is None:
                    return False
                row.video_url = url
        return True

    async def delete(self, collection: Collection, content_id: uuid.UUID) -> bool:
        model = collection.model
        async with self._sf() as session:
            async with session.begin():
                result = await session.execute(delete(model).where(model.id == content_id))
        return bool(result.rowcount)


def _type_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, ContentType) else str(value)


__all__ = [
    "Collection",
    "COLLECTIONS",
    "SLUG_COLLECTION",
    "MODELS_BY_TABLE",
    "FACET_SAMPLE_SIZE",
    "slug_to_label",
    "build_list_query",
    "build_facet_query",
    "distinct_values",
    "facets_from_rows",
    "ContentRepository",
]
