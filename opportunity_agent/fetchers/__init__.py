"""Content fetching layer for news feeds."""

from .rss import RSSItem, fetch_rss_entries

__all__ = ["RSSItem", "fetch_rss_entries"]
