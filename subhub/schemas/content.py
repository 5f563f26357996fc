from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from subhub.schemas.enums import ContentType, PageStatus, SortKey

ALL = "All"


def _blank_to_none(v: Any) -> Any:
    if v is None:
        return None
    s = str(v).strip()
    return None if not s or s == ALL else s


class ContentFilters(BaseModel):
    """Optional list filters. Blank values and the "All" sentinel mean "no filter"."""

    category: Optional[str] = None
    year: Optional[int] = None
    language: Optional[str] = None
    search: Optional[str] = None
    sort: SortKey = SortKey.LATEST

    @field_validator("category", "language", "search", mode="before")
    @classmethod
    def _strip_sentinel(cls, v):
        return _blank_to_none(v)

    @field_validator("year", mode="before")
    @classmethod
    def _year(cls, v):
        return _blank_to_none(v)

    @field_validator("sort", mode="before")
    @classmethod
    def _sort(cls, v):
        return v or SortKey.LATEST


class ContentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    type: ContentType
    year: Optional[int] = None
    category: Optional[str] = None
    language: Optional[str] = None
    rating: Optional[float] = None
    imdb_rating: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer: Optional[str] = None
    video_url: Optional[str] = None
    download_url: Optional[str] = None
    actors: Optional[str] = None
    cast_details: List[Any] = Field(default_factory=list)
    director: Optional[str] = None
    country: Optional[str] = None
    duration: Optional[str] = None
    subtitle_author: Optional[str] = None
    subtitle_site: Optional[str] = None
    tmdb_id: Optional[int] = None
    is_featured: bool = False
    created_at: Optional[datetime] = None


class ContentWrite(BaseModel):
    """Admin create/update payload. `type` defaults from the target collection."""

    title: str = Field(..., min_length=1, max_length=512)
    type: Optional[ContentType] = None
    year: Optional[int] = Field(None, ge=1870, le=2100)
    category: Optional[str] = None
    language: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    imdb_rating: Optional[float] = Field(None, ge=0, le=10)
    description: Optional[str] = None
    image_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer: Optional[str] = None
    video_url: Optional[str] = None
    download_url: Optional[str] = None
    actors: Optional[str] = None
    cast_details: List[Any] = Field(default_factory=list)
    director: Optional[str] = None
    country: Optional[str] = None
    duration: Optional[str] = None
    subtitle_author: Optional[str] = None
    subtitle_site: Optional[str] = None
    tmdb_id: Optional[int] = None
    is_featured: bool = False


class Facets(BaseModel):
    """Distinct filter values; each list starts with "All"."""

    categories: List[str] = Field(default_factory=lambda: [ALL])
    years: List[str] = Field(default_factory=lambda: [ALL])
    languages: List[str] = Field(default_factory=lambda: [ALL])


class ContentPage(BaseModel):
    section: str
    status: PageStatus
    items: List[ContentItem] = Field(default_factory=list)
    facets: Facets = Field(default_factory=Facets)
    filters: ContentFilters = Field(default_factory=ContentFilters)
    watchlist_ids: List[uuid.UUID] = Field(default_factory=list)
    error: Optional[str] = None
    show_ads: bool = True


class EpisodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    season_number: int
    episode_number: int
    title: Optional[str] = None
    video_url: Optional[str] = None
    subtitle_url: Optional[str] = None


class ContentDetail(BaseModel):
    item: ContentItem
    in_watchlist: bool = False
    episodes: List[EpisodeOut] = Field(default_factory=list)
    show_ads: bool = True


class HomePage(BaseModel):
    """Latest rows per section for the landing page."""

    status: PageStatus
    sections: Dict[str, List[ContentItem]] = Field(default_factory=dict)
    watchlist_ids: List[uuid.UUID] = Field(default_factory=list)
    error: Optional[str] = None
    show_ads: bool = True


class SearchResults(BaseModel):
    query: str
    status: PageStatus
    items: List[ContentItem] = Field(default_factory=list)
    error: Optional[str] = None
    show_ads: bool = True


class ContentPatch(BaseModel):
    """Partial admin update; only fields present in the request are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=512)
    type: Optional[ContentType] = None
    year: Optional[int] = Field(None, ge=1870, le=2100)
    category: Optional[str] = None
    language: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    imdb_rating: Optional[float] = Field(None, ge=0, le=10)
    description: Optional[str] = None
    image_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer: Optional[str] = None
    video_url: Optional[str] = None
    download_url: Optional[str] = None
    actors: Optional[str] = None
    cast_details: Optional[List[Any]] = None
    director: Optional[str] = None
    country: Optional[str] = None
    duration: Optional[str] = None
    subtitle_author: Optional[str] = None
    subtitle_site: Optional[str] = None
    tmdb_id: Optional[int] = None
    is_featured: Optional[bool] = None
