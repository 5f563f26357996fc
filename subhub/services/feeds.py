# subhub/services/feeds.py
from __future__ import annotations

"""
RSS/Atom fetching for the external update monitor.

httpx downloads the document (shared client, timeouts, redirects);
feedparser turns it into entries. A document that fails to parse *and*
yields no entries is an error; feedparser's "bozo" warnings on otherwise
usable feeds are logged and ignored.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import feedparser
import httpx

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """A feed could not be downloaded or parsed."""


@dataclass(frozen=True)
class FeedEntry:
    title: Optional[str]
    link: Optional[str]
    guid: Optional[str]

    @property
    def dedup_key(self) -> Optional[str]:
        """Feed guid, falling back to the link when the feed has none."""
        return self.guid or self.link or None


def parse_feed(document: bytes | str) -> List[FeedEntry]:
    parsed = feedparser.parse(document)
    if parsed.get("bozo") and not parsed.entries:
        raise FeedError(f"Unparseable feed: {parsed.get('bozo_exception')}")
    if parsed.get("bozo"):
        logger.debug("Feed parsed with warnings: %s", parsed.get("bozo_exception"))
    return [
        FeedEntry(
            title=(entry.get("title") or "").strip() or None,
            link=(entry.get("link") or "").strip() or None,
            guid=(entry.get("id") or "").strip() or None,
        )
        for entry in parsed.entries
    ]


class FeedFetcher:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str) -> List[FeedEntry]:
        try:
            resp = await self._client.get(url, headers={"Accept": "application/rss+xml, application/xml;q=0.9, */*;q=0.8"})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise FeedError(f"Could not fetch {url}: {exc}") from exc
        return parse_feed(resp.content)


__all__ = ["FeedEntry", "FeedError", "FeedFetcher", "parse_feed"]
