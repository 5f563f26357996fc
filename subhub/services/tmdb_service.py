# subhub/services/tmdb_service.py
from __future__ import annotations

"""
SubHub SL — TMDB lookups for the admin editor
=============================================

- `search(query, kind)`   → lightweight candidates from `/search/movie|tv`
- `details(tmdb_id, kind)`→ one record mapped onto content fields, fetched with
  `append_to_response=credits,videos,images`
- `upcoming(...)`         → `/discover/movie` releases in the next 60 days

Without `TMDB_API_KEY` the client is disabled: `search`/`upcoming` return `[]`
and `details` returns `None`. Upstream failures raise `UpstreamError`.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from subhub.core.config import settings
from subhub.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

PROVIDER = "tmdb"
UPCOMING_WINDOW_DAYS = 60
TOP_CAST = 10

GENRES: Dict[int, str] = {
    28: "Action", 12: "Adventure", 16: "Animation", 35: "Comedy", 80: "Crime",
    99: "Documentary", 18: "Drama", 10751: "Family", 14: "Fantasy", 36: "History",
    27: "Horror", 10402: "Music", 9648: "Mystery", 10749: "Romance", 878: "Sci-Fi",
    10770: "TV Movie", 53: "Thriller", 10752: "War", 37: "Western",
}

LANGUAGES: Dict[str, str] = {
    "en": "English", "hi": "Hindi", "ta": "Tamil", "te": "Telugu", "ml": "Malayalam",
    "si": "Sinhala", "ko": "Korean", "ja": "Japanese", "zh": "Chinese", "fr": "French",
    "es": "Spanish", "de": "German", "it": "Italian", "th": "Thai", "kn": "Kannada",
}
LANGUAGE_CODES: Dict[str, str] = {v: k for k, v in LANGUAGES.items()}
UPCOMING_DEFAULT_LANGS = "en|hi|ta|te|ml"


def _image(path: Optional[str], size: str) -> Optional[str]:
    if not path:
        return None
    return f"{settings.TMDB_IMAGE_BASE_URL}/{size}{path}"


def _year(raw: Optional[str]) -> Optional[int]:
    head = (raw or "").split("-")[0]
    return int(head) if head.isdigit() else None


def _rating(value: Any) -> Optional[float]:
    try:
        return round(float(value), 1)
    except (TypeError, ValueError):
        return None


def language_name(code: Optional[str]) -> str:
    if not code:
        return "English"
    return LANGUAGES.get(code, code)


def _trailer(videos: Dict[str, Any]) -> Optional[str]:
    for v in videos.get("results") or []:
        if v.get("type") == "Trailer" and v.get("site") == "YouTube" and v.get("key"):
            return f"https://www.youtube.com/watch?v={v['key']}"
    return None


def map_search_result(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "tmdb_id": item.get("id"),
        "title": item.get("title") or item.get("name"),
        "image_url": _image(item.get("poster_path"), "w500"),
        "year": _year(item.get("release_date") or item.get("first_air_date")),
        "overview": item.get("overview"),
    }


def map_details(data: Dict[str, Any]) -> Dict[str, Any]:
    """TMDB detail payload → content fields (see `ContentWrite`)."""
    credits = data.get("credits") or {}
    crew = credits.get("crew") or []
    cast = (credits.get("cast") or [])[:TOP_CAST]
    director = next((c.get("name") for c in crew if c.get("job") == "Director"), None)
    genres = [g.get("name") for g in data.get("genres") or [] if g.get("name")]
    runtime = data.get("runtime") or next(iter(data.get("episode_run_time") or []), None)
    countries = data.get("production_countries") or []
    images = data.get("images") or {}

    return {
        "tmdb_id": data.get("id"),
        "title": data.get("title") or data.get("name"),
        "description": data.get("overview"),
        "image_url": _image(data.get("poster_path"), "w500"),
        "backdrop_url": _image(data.get("backdrop_path"), "original"),
        "rating": _rating(data.get("vote_average")),
        "imdb_rating": _rating(data.get("vote_average")),
        "year": _year(data.get("release_date") or data.get("first_air_date")),
        "category": ", ".join(genres) or None,
        "actors": ", ".join(a.get("name") for a in cast if a.get("name")) or None,
        "cast_details": [
            {
                "name": a.get("name"),
                "character": a.get("character"),
                "image": _image(a.get("profile_path"), "w200"),
            }
            for a in cast
        ],
        "director": director,
        "duration": f"{runtime} min" if runtime else None,
        "country": countries[0].get("name") if countries else None,
        "trailer": _trailer(data.get("videos") or {}),
        "language": language_name(data.get("original_language")),
        "backdrops": [_image(i.get("file_path"), "original") for i in (images.get("backdrops") or [])[:10]],
        "posters": [_image(i.get("file_path"), "w500") for i in (images.get("posters") or [])[:10]],
    }


def map_upcoming(item: Dict[str, Any]) -> Dict[str, Any]:
    genre_ids = item.get("genre_ids") or []
    return {
        "tmdb_id": item.get("id"),
        "title": item.get("title"),
        "image_url": _image(item.get("poster_path"), "w500"),
        "backdrop_url": _image(item.get("backdrop_path"), "original"),
        "year": _year(item.get("release_date")),
        "release_date": item.get("release_date"),
        "rating": _rating(item.get("vote_average")),
        "category": GENRES.get(genre_ids[0], "Movie") if genre_ids else "Movie",
        "language": language_name(item.get("original_language")),
        "overview": item.get("overview"),
    }


class TMDBClient:
    def __init__(self, client: httpx.AsyncClient, *, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self._client = client
        self.api_key = settings.tmdb_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = {"api_key": self.api_key, **(params or {})}
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            resp = await self._client.get(url, params=query)
        except httpx.HTTPError as exc:
            logger.error("TMDB request failed: %s", exc)
            raise UpstreamError("TMDB request failed", provider=PROVIDER) from exc
        if resp.status_code == 401:
            raise UpstreamError("TMDB rejected the API key", provider=PROVIDER)
        if resp.status_code == 404:
            return {}
        if resp.is_error:
            logger.error("TMDB %s answered %s", endpoint, resp.status_code)
            raise UpstreamError(f"TMDB error {resp.status_code}", provider=PROVIDER)
        return resp.json()

    async def search(self, query: str, kind: str = "movie") -> List[Dict[str, Any]]:
        if not self.enabled:
            logger.warning("TMDB_API_KEY is not set; search disabled")
            return []
        term = (query or "").strip()
        if not term:
            return []
        endpoint = "/search/tv" if kind == "tv" else "/search/movie"
        data = await self._get(endpoint, {"query": term})
        return [map_search_result(item) for item in data.get("results") or []]

    async def details(self, tmdb_id: int, kind: str = "movie") -> Optional[Dict[str, Any]]:
        if not self.enabled:
            return None
        endpoint = f"/tv/{tmdb_id}" if kind == "tv" else f"/movie/{tmdb_id}"
        data = await self._get(endpoint, {"append_to_response": "credits,videos,images"})
        return map_details(data) if data else None

    async def upcoming(
        self,
        *,
        category: Optional[str] = None,
        language: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """Popular releases in the coming window, earliest first, deduplicated."""
        if not self.enabled:
            return []
        start = today or date.today()
        base = {
            "language": "en-US",
            "sort_by": "popularity.desc",
            "primary_release_date.gte": start.isoformat(),
            "primary_release_date.lte": (start + timedelta(days=UPCOMING_WINDOW_DAYS)).isoformat(),
            "page": 1,
        }
        if category == "Animation":
            variants = [{"with_genres": 16}]
        elif language and language != "All":
            variants = [{"with_original_language": LANGUAGE_CODES.get(language, "en")}]
        else:
            variants = [{"with_original_language": UPCOMING_DEFAULT_LANGS}, {"with_genres": 16}]

        pages = await asyncio.gather(*(self._get("/discover/movie", {**base, **v}) for v in variants))

        seen = set()
        items: List[Dict[str, Any]] = []
        for page in pages:
            for item in page.get("results") or []:
                if not item.get("release_date") or item.get("id") in seen:
                    continue
                seen.add(item.get("id"))
                items.append(item)
        items.sort(key=lambda i: i["release_date"])
        return [map_upcoming(i) for i in items]


__all__ = ["TMDBClient", "map_details", "map_search_result", "map_upcoming", "language_name"]
