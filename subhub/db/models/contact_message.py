# subhub/db/models/contact_message.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from subhub.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class ContactMessage(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "contact_messages"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text, nullable=False)


__all__ = ["ContactMessage"]
