# tests/test_monitor/test_feeds.py

import httpx
import pytest

from subhub.services.feeds import FeedError, FeedFetcher, parse_feed

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Baiscope</title>
    <link>https://baiscope.test/</link>
    <description>Sinhala subtitles</description>
    <item>
      <title>Oppenheimer (2023) Sinhala Subtitles</title>
      <link>https://baiscope.test/oppenheimer</link>
      <guid isPermaLink="false">https://baiscope.test/?p=101</guid>
    </item>
    <item>
      <title>Dune: Part Two (2024) Sinhala Subtitles</title>
      <link>https://baiscope.test/dune-2</link>
    </item>
  </channel>
</rss>
"""


def test_parse_feed_keeps_document_order_and_keys():
    entries = parse_feed(RSS)
    assert [e.title for e in entries] == [
        "Oppenheimer (2023) Sinhala Subtitles",
        "Dune: Part Two (2024) Sinhala Subtitles",
    ]
    assert entries[0].dedup_key == "https://baiscope.test/?p=101"
    assert entries[1].guid is None
    assert entries[1].dedup_key == "https://baiscope.test/dune-2"


@pytest.mark.anyio
async def test_fetcher_parses_downloaded_feed(mock_http):
    recorder, client = mock_http(lambda request: httpx.Response(200, content=RSS))
    entries = await FeedFetcher(client).fetch("https://baiscope.test/feed/")
    assert len(entries) == 2
    assert str(recorder.requests[0].url) == "https://baiscope.test/feed/"


@pytest.mark.anyio
async def test_fetcher_raises_on_http_error(mock_http):
    _, client = mock_http(lambda request: httpx.Response(503))
    with pytest.raises(FeedError):
        await FeedFetcher(client).fetch("https://zoom.test/feed/")


@pytest.mark.anyio
async def test_fetcher_raises_on_network_error(mock_http):
    def boom(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    _, client = mock_http(boom)
    with pytest.raises(FeedError):
        await FeedFetcher(client).fetch("https://zoom.test/feed/")
