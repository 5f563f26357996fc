# subhub/db/base.py
"""
SubHub SL — SQLAlchemy Base registry
====================================

Import all ORM models so their tables are registered on `Base.metadata`
(Alembic autogeneration, test `create_all`). Import-only; no runtime logic.
"""

from subhub.db.base_class import Base

# Catalog
from subhub.db.models.content import Movie, SinhalaMovie, KoreanDrama, TVEpisode

# Viewers
from subhub.db.models.profile import Profile
from subhub.db.models.watchlist import WatchlistEntry
from subhub.db.models.contact_message import ContactMessage

# Monitor
from subhub.db.models.external_update import ExternalUpdate

__all__ = [
    "Base",
    "Movie",
    "SinhalaMovie",
    "KoreanDrama",
    "TVEpisode",
    "Profile",
    "WatchlistEntry",
    "ContactMessage",
    "ExternalUpdate",
]
