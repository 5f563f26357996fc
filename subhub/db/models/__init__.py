from subhub.db.models.contact_message import ContactMessage
from subhub.db.models.content import ContentMixin, KoreanDrama, Movie, SinhalaMovie, TVEpisode
from subhub.db.models.external_update import ExternalUpdate
from subhub.db.models.profile import Profile
from subhub.db.models.watchlist import WatchlistEntry

__all__ = [
    "ContactMessage",
    "ContentMixin",
    "ExternalUpdate",
    "KoreanDrama",
    "Movie",
    "Profile",
    "SinhalaMovie",
    "TVEpisode",
    "WatchlistEntry",
]
