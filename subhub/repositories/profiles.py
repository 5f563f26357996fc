# subhub/repositories/profiles.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subhub.db.models.contact_message import ContactMessage
from subhub.db.models.profile import Profile


class ProfileRepository:
    """Viewer profiles and contact-form messages."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    async def get(self, user_id: uuid.UUID) -> Optional[Profile]:
        async with self._sf() as session:
            return await session.get(Profile, user_id)

    async def upsert(
        self, user_id: uuid.UUID, *, full_name: Optional[str], avatar_url: Optional[str]
    ) -> Profile:
        async with self._sf() as session:
            async with session.begin():
                profile = await session.get(Profile, user_id)
                if profile is None:
                    profile = Profile(id=user_id)
                    session.add(profile)
                profile.full_name = full_name
                profile.avatar_url = avatar_url
            await session.refresh(profile)
            return profile

    async def add_contact_message(
        self, *, name: str, email: str, subject: Optional[str], message: str
    ) -> ContactMessage:
        row = ContactMessage(name=name, email=email, subject=subject, message=message)
        async with self._sf() as session:
            async with session.begin():
                session.add(row)
            await session.refresh(row)
        return row


__all__ = ["ProfileRepository"]
