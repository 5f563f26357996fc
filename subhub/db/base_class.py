# subhub/db/base_class.py
from __future__ import annotations

"""
# SubHub SL — SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (Alembic-friendly)
- Helpful `__repr__`
- `UUIDPKMixin`: UUID primary key (matches the Supabase tables)
- `CreatedAtMixin`: server-side `created_at` (UTC)

Types stay dialect-neutral (`Uuid`, `JSON`) so the same metadata builds on
Postgres in production and on SQLite in the test-suite.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Global declarative base for SubHub models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover
        attrs = [
            f"{key}={getattr(self, key)!r}"
            for key in ("id", "title", "user_id", "guid")
            if key in self.__dict__
        ]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


class UUIDPKMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )


__all__ = ["Base", "UUIDPKMixin", "CreatedAtMixin", "NAMING_CONVENTION"]
