from datetime import datetime, timezone

import pytest
import requests

from opportunity_agent.fetchers import fetch_rss_entries
from opportunity_agent.models import FeedSource
from opportunity_agent.processors import clean_html_to_text, truncate_text

FEED = FeedSource(name="Privacy Feed", url="https://example.com/feed.xml")

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Privacy Feed</title>
    <item>
      <title>Zcash announces shielded assets</title>
      <link>https://example.com/zcash</link>
      <guid>zcash-001</guid>
      <description>&lt;p&gt;Privacy &lt;b&gt;upgrade&lt;/b&gt; lands&lt;/p&gt;</description>
      <pubDate>Sun, 18 Oct 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Untimed post</title>
      <link>https://example.com/untimed</link>
    </item>
  </channel>
</rss>
"""


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


def test_parses_feed_entries(monkeypatch):
    captured = {}

    def fake_get(url, headers=None, timeout=None):
        captured.update(url=url, headers=headers, timeout=timeout)
        return FakeResponse(200, RSS)

    monkeypatch.setattr("opportunity_agent.fetchers.rss.requests.get", fake_get)

    items = fetch_rss_entries(FEED, timeout=3)

    assert captured["url"] == FEED.url
    assert captured["timeout"] == 3
    assert "User-Agent" in captured["headers"]
    assert len(items) == 2
    first = items[0]
    assert first.title == "Zcash announces shielded assets"
    assert first.guid == "zcash-001"
    assert first.link == "https://example.com/zcash"
    assert first.published == datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)
    assert "upgrade" in first.description
    assert items[1].published is None


def test_http_error_propagates(monkeypatch):
    monkeypatch.setattr(
        "opportunity_agent.fetchers.rss.requests.get",
        lambda url, **kwargs: FakeResponse(503),
    )
    with pytest.raises(requests.HTTPError):
        fetch_rss_entries(FEED)


def test_non_rss_source_is_rejected():
    with pytest.raises(ValueError):
        fetch_rss_entries(FeedSource(name="x", url="https://example.com", type="atom"))


def test_html_is_reduced_to_text():
    assert clean_html_to_text("<p>Privacy <b>upgrade</b></p>") == "Privacy upgrade"
    assert truncate_text("abcdef", 3).startswith("abc")
    assert truncate_text(None, 3) is None
