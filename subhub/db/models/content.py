# subhub/db/models/content.py
from __future__ import annotations

"""
Content collections.

Three physical tables share one shape (`ContentMixin`):
- `movies`          → type "Movie" or "TV Show"
- `sinhala_movies`  → type "Sinhala Movie"
- `korean_dramas`   → type "Korean Drama"

Identifiers are only unique within a table. `tv_episodes` hangs off a
`movies` row whose type is "TV Show".
"""

import uuid
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from subhub.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class ContentMixin(UUIDPKMixin, CreatedAtMixin):
    """Columns shared by every content collection."""

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    year: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(255))
    language: Mapped[Optional[str]] = mapped_column(String(64))
    rating: Mapped[Optional[float]] = mapped_column(Float)
    imdb_rating: Mapped[Optional[float]] = mapped_column(Float)
    type: Mapped[str] = mapped_column(String(32), nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(Text)
    backdrop_url: Mapped[Optional[str]] = mapped_column(Text)
    trailer: Mapped[Optional[str]] = mapped_column(Text)
    video_url: Mapped[Optional[str]] = mapped_column(Text)
    download_url: Mapped[Optional[str]] = mapped_column(Text)

    actors: Mapped[Optional[str]] = mapped_column(Text)
    cast_details: Mapped[List[Any]] = mapped_column(JSON, default=list, nullable=False)
    director: Mapped[Optional[str]] = mapped_column(String(255))
    country: Mapped[Optional[str]] = mapped_column(String(128))
    duration: Mapped[Optional[str]] = mapped_column(String(64))

    subtitle_author: Mapped[Optional[str]] = mapped_column(String(255))
    subtitle_site: Mapped[Optional[str]] = mapped_column(String(255))
    tmdb_id: Mapped[Optional[int]] = mapped_column(Integer)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Movie(ContentMixin, Base):
    __tablename__ = "movies"
    __table_args__ = (Index("ix_movies_type_created_at", "type", "created_at"),)


class SinhalaMovie(ContentMixin, Base):
    __tablename__ = "sinhala_movies"


class KoreanDrama(ContentMixin, Base):
    __tablename__ = "korean_dramas"


class TVEpisode(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "tv_episodes"
    __table_args__ = (
        UniqueConstraint("show_id", "season_number", "episode_number", name="uq_tv_episodes_show_season_episode"),
    )

    show_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    season_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(512))
    video_url: Mapped[Optional[str]] = mapped_column(Text)
    subtitle_url: Mapped[Optional[str]] = mapped_column(Text)


__all__ = ["ContentMixin", "Movie", "SinhalaMovie", "KoreanDrama", "TVEpisode"]
