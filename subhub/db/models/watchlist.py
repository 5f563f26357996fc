# subhub/db/models/watchlist.py
from __future__ import annotations

"""
Watchlist edges (user × content item).

`(user_id, movie_id)` is unique; the store's constraint is what makes a
duplicate add a no-op. `collection` records which content table `movie_id`
points into so listings can join without a cross-table foreign key. Edges
whose content row has gone away are left in place and skipped on read.
"""

import uuid

from sqlalchemy import String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from subhub.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class WatchlistEntry(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "watchlists"
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="uq_watchlists_user_movie"),)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    movie_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    collection: Mapped[str] = mapped_column(String(32), nullable=False, default="movies")


__all__ = ["WatchlistEntry"]
