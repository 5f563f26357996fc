from __future__ import annotations

from enum import Enum


class ViewerRole(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class ContentType(str, Enum):
    """Display type; also decides which collection a record lives in."""

    MOVIE = "Movie"
    TV_SHOW = "TV Show"
    SINHALA_MOVIE = "Sinhala Movie"
    KOREAN_DRAMA = "Korean Drama"


class SortKey(str, Enum):
    LATEST = "latest"
    OLD = "old"
    RATING = "rating"
    YEAR = "year"


class PageStatus(str, Enum):
    """Render state of a list page: results, nothing matched, or store failure."""

    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


class MonitorStatus(str, Enum):
    ALREADY_SEEN = "Already Seen"
    NOTIFIED = "Notified"
    EMAIL_FAILED = "Email Failed"
    ERROR = "Error"


class UploadStatus(str, Enum):
    PREPARING = "preparing"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETE, UploadStatus.ERROR)
