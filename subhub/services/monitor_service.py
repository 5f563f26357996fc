# subhub/services/monitor_service.py
from __future__ import annotations

"""
SubHub SL — External Update Monitor
===================================

One run per scheduled trigger. For each configured source, in order:

1. fetch + parse the feed and keep the newest `items_per_feed` entries
2. dedup key = guid, else link
3. key already in the seen-log        → "Already Seen"
4. otherwise send the notification:
   - sent   → append to the seen-log, "Notified"
   - failed → nothing written (next run retries), "Email Failed" + error
5. anything raised while handling a source → one "Error" outcome for that
   source; the run moves on to the next source

The returned `MonitorSummary` is the only output besides seen-log rows and
the emails themselves.
"""

import logging
from typing import List, Protocol, Sequence

from subhub.core.config import FeedSource, settings
from subhub.repositories.external_updates import SeenLog
from subhub.schemas.enums import MonitorStatus
from subhub.schemas.monitor import MonitorOutcome, MonitorSummary
from subhub.services.feeds import FeedEntry
from subhub.services.notification_service import SendResult

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> List[FeedEntry]: ...


class ExternalNotifier(Protocol):
    async def notify_external_item(self, *, site_name: str, title: str, link: str | None) -> SendResult: ...


class UpdateMonitor:
    def __init__(
        self,
        *,
        fetcher: Fetcher,
        seen_log: SeenLog,
        notifier: ExternalNotifier,
        sources: Sequence[FeedSource] | None = None,
        items_per_feed: int | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.seen_log = seen_log
        self.notifier = notifier
        self.sources: List[FeedSource] = list(sources if sources is not None else settings.EXTERNAL_FEEDS)
        self.items_per_feed = settings.MONITOR_ITEMS_PER_FEED if items_per_feed is None else items_per_feed

    async def run(self) -> MonitorSummary:
        summary = MonitorSummary()
        for source in self.sources:
            try:
                entries = await self.fetcher.fetch(source.url)
                for entry in entries[: self.items_per_feed]:
                    summary.results.append(await self._handle(source, entry))
            except Exception as exc:
                logger.exception("Error monitoring %s", source.name)
                summary.results.append(
                    MonitorOutcome(site=source.name, status=MonitorStatus.ERROR, error=str(exc) or type(exc).__name__)
                )
        logger.info(
            "Monitor run done: notified=%s seen=%s failed=%s errors=%s",
            summary.count(MonitorStatus.NOTIFIED),
            summary.count(MonitorStatus.ALREADY_SEEN),
            summary.count(MonitorStatus.EMAIL_FAILED),
            summary.count(MonitorStatus.ERROR),
        )
        return summary

    async def _handle(self, source: FeedSource, entry: FeedEntry) -> MonitorOutcome:
        key = entry.dedup_key
        title = entry.title or entry.link or "(untitled)"
        if key is None:
            return MonitorOutcome(
                site=source.name, title=title, status=MonitorStatus.ERROR, error="Feed item has no guid or link"
            )

        if await self.seen_log.has_seen(key):
            return MonitorOutcome(site=source.name, title=title, guid=key, status=MonitorStatus.ALREADY_SEEN)

        logger.info("New content found on %s: %s", source.name, title)
        result = await self.notifier.notify_external_item(site_name=source.name, title=title, link=entry.link)
        if not result.success:
            return MonitorOutcome(
                site=source.name, title=title, guid=key, status=MonitorStatus.EMAIL_FAILED, error=result.error
            )

        await self.seen_log.record(site_name=source.name, guid=key, title=entry.title, link=entry.link)
        return MonitorOutcome(site=source.name, title=title, guid=key, status=MonitorStatus.NOTIFIED)


__all__ = ["UpdateMonitor", "Fetcher", "ExternalNotifier"]
