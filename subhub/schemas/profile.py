from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from subhub.schemas.content import ContentItem
from subhub.schemas.enums import PageStatus


class ProfileOut(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=2048)

    @field_validator("full_name", "avatar_url", mode="before")
    @classmethod
    def _blank(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class ContactIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    subject: Optional[str] = Field(None, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: Optional[datetime] = None


class WatchlistEntryOut(BaseModel):
    collection: str
    item: ContentItem


class MyListPage(BaseModel):
    status: PageStatus
    items: List[WatchlistEntryOut] = Field(default_factory=list)
    error: Optional[str] = None
    show_ads: bool = True


class AdminDashboard(BaseModel):
    status: PageStatus
    counts: dict = Field(default_factory=dict)
    error: Optional[str] = None
    show_ads: bool = False
