# tests/test_monitor/test_update_monitor.py

import pytest

from subhub.core.config import FeedSource
from subhub.repositories.external_updates import ExternalUpdateRepository
from subhub.schemas.enums import MonitorStatus
from subhub.services.feeds import FeedEntry, FeedError
from subhub.services.monitor_service import UpdateMonitor
from subhub.services.notification_service import SendResult
from tests.fixtures.mocks.email import FakeFetcher, FakeNotifier, FakeSeenLog

BAISCOPE = FeedSource(name="Baiscope.lk", url="https://baiscope.test/feed/")
ZOOM = FeedSource(name="Zoom.lk", url="https://zoom.test/feed/")


def entry(n: int, *, guid: bool = True) -> FeedEntry:
    link = f"https://baiscope.test/post-{n}"
    return FeedEntry(title=f"Post {n}", link=link, guid=f"guid-{n}" if guid else None)


def statuses(summary):
    return [r.status for r in summary.results]


# ─────────────────────────────────────────────────────────────
# Dedup & notify
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_second_run_reports_already_seen(fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [entry(1)]}),
        seen_log=fake_seen_log,
        notifier=fake_notifier,
        sources=[BAISCOPE],
    )

    first = await monitor.run()
    second = await monitor.run()

    assert statuses(first) == [MonitorStatus.NOTIFIED]
    assert statuses(second) == [MonitorStatus.ALREADY_SEEN]
    assert len(fake_notifier.sent) == 1
    assert list(fake_seen_log.rows) == ["guid-1"]


@pytest.mark.anyio
async def test_email_failure_writes_nothing_and_next_run_retries(fake_seen_log: FakeSeenLog):
    notifier = FakeNotifier([SendResult(success=False, error="API Key missing")])
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [entry(1)]}),
        seen_log=fake_seen_log,
        notifier=notifier,
        sources=[BAISCOPE],
    )

    first = await monitor.run()
    assert statuses(first) == [MonitorStatus.EMAIL_FAILED]
    assert first.results[0].error == "API Key missing"
    assert fake_seen_log.rows == {}

    second = await monitor.run()
    assert statuses(second) == [MonitorStatus.NOTIFIED]
    assert "guid-1" in fake_seen_log.rows
    assert len(notifier.sent) == 2


@pytest.mark.anyio
async def test_link_is_the_dedup_key_without_guid(fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [entry(7, guid=False)]}),
        seen_log=fake_seen_log,
        notifier=fake_notifier,
        sources=[BAISCOPE],
    )
    summary = await monitor.run()
    assert summary.results[0].guid == "https://baiscope.test/post-7"
    assert "https://baiscope.test/post-7" in fake_seen_log.rows


@pytest.mark.anyio
async def test_only_the_newest_items_are_checked(fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [entry(n) for n in range(8)]}),
        seen_log=fake_seen_log,
        notifier=fake_notifier,
        sources=[BAISCOPE],
        items_per_feed=5,
    )
    summary = await monitor.run()
    assert [r.guid for r in summary.results] == [f"guid-{n}" for n in range(5)]


@pytest.mark.anyio
async def test_zero_items_per_feed_checks_nothing(fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [entry(n) for n in range(3)]}),
        seen_log=fake_seen_log,
        notifier=fake_notifier,
        sources=[BAISCOPE],
        items_per_feed=0,
    )
    summary = await monitor.run()
    assert summary.results == []
    assert fake_notifier.sent == []


# ─────────────────────────────────────────────────────────────
# Source failures
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_failing_source_is_reported_and_the_run_continues(
    fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier
):
    fetcher = FakeFetcher({BAISCOPE.url: FeedError("HTTP 503"), ZOOM.url: [entry(2)]})
    monitor = UpdateMonitor(
        fetcher=fetcher, seen_log=fake_seen_log, notifier=fake_notifier, sources=[BAISCOPE, ZOOM]
    )

    summary = await monitor.run()

    assert fetcher.calls == [BAISCOPE.url, ZOOM.url]
    assert summary.success is True
    assert [(r.site, r.status) for r in summary.results] == [
        ("Baiscope.lk", MonitorStatus.ERROR),
        ("Zoom.lk", MonitorStatus.NOTIFIED),
    ]
    assert summary.results[0].error == "HTTP 503"


@pytest.mark.anyio
async def test_item_without_guid_or_link_is_an_error_outcome(fake_seen_log: FakeSeenLog, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({BAISCOPE.url: [FeedEntry(title="Orphan", link=None, guid=None)]}),
        seen_log=fake_seen_log,
        notifier=fake_notifier,
        sources=[BAISCOPE],
    )
    summary = await monitor.run()
    assert statuses(summary) == [MonitorStatus.ERROR]
    assert fake_notifier.sent == []


# ─────────────────────────────────────────────────────────────
# Seen-log against the real store
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_seen_log_records_once(session_factory):
    log = ExternalUpdateRepository(session_factory)
    assert await log.has_seen("guid-1") is False

    await log.record(site_name="Zoom.lk", guid="guid-1", title="Post", link="https://zoom.test/post")
    await log.record(site_name="Zoom.lk", guid="guid-1", title="Post", link="https://zoom.test/post")

    assert await log.has_seen("guid-1") is True


@pytest.mark.anyio
async def test_monitor_with_store_backed_seen_log(session_factory, fake_notifier: FakeNotifier):
    monitor = UpdateMonitor(
        fetcher=FakeFetcher({ZOOM.url: [entry(1), entry(2)]}),
        seen_log=ExternalUpdateRepository(session_factory),
        notifier=fake_notifier,
        sources=[ZOOM],
    )
    assert statuses(await monitor.run()) == [MonitorStatus.NOTIFIED, MonitorStatus.NOTIFIED]
    assert statuses(await monitor.run()) == [MonitorStatus.ALREADY_SEEN, MonitorStatus.ALREADY_SEEN]
