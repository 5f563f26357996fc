# subhub/db/models/external_update.py
from __future__ import annotations

"""
Seen-log for the external update monitor.

Append-only: a row exists once the notification for that feed item was sent.
`guid` (feed guid, or the item link when the feed has none) is unique.
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from subhub.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class ExternalUpdate(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "external_updates"

    site_name: Mapped[str] = mapped_column(String(128), nullable=False)
    guid: Mapped[str] = mapped_column(String(1024), nullable=False, unique=True)
    title: Mapped[Optional[str]] = mapped_column(Text)
    link: Mapped[Optional[str]] = mapped_column(Text)


__all__ = ["ExternalUpdate"]
