from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import requests

from ..models import FeedSource
from ..utils.logging import get_logger

logger = get_logger("oa.fetchers.rss")

USER_AGENT = "OpportunityAgent-NewsBot/1.0"


@dataclass(slots=True)
class RSSItem:
    """One feed entry as delivered by the feed, before any scoring."""

    title: str
    link: str
    guid: Optional[str]
    description: Optional[str]
    published: Optional[datetime]
    content: Optional[str]


def _entry_time(entry: Any) -> Optional[datetime]:
    # feedparser hands back UTC struct_time; prefer publish over update time
    stamp: Optional[time.struct_time] = entry.get("published_parsed") or entry.get("updated_parsed")
    if not stamp:
        return None
    try:
        return datetime(*stamp[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def _entry_body(entry: Any) -> Optional[str]:
    blocks = entry.get("content")
    if isinstance(blocks, list) and blocks:
        return blocks[0].get("value")
    return None


def _to_item(entry: Any) -> RSSItem:
    return RSSItem(
        title=entry.get("title") or "",
        link=entry.get("link") or "",
        guid=entry.get("id") or None,
        description=entry.get("summary"),
        published=_entry_time(entry),
        content=_entry_body(entry),
    )


def _download(url: str, timeout: int) -> bytes:
    resp = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    if resp.status_code >= 400:
        logger.warning("Feed %s answered HTTP %s", url, resp.status_code)
        resp.raise_for_status()
    return resp.content


def fetch_rss_entries(source: FeedSource, *, timeout: int = 10) -> List[RSSItem]:
    """Download ``source`` and return its entries in feed order.

    Transport and HTTP errors are raised; the ingestor decides that a failed
    source simply contributes nothing to the cycle.
    """
    if source.type != "rss":
        raise ValueError(f"Source '{source.name}' has unsupported type '{source.type}'")

    logger.debug("GET %s (timeout=%ss)", source.url, timeout)
    try:
        body = _download(source.url, timeout)
    except requests.RequestException as exc:
        logger.warning("Could not download feed %s: %s", source.name, exc)
        raise

    feed = feedparser.parse(body)
    if feed.get("bozo"):
        # Malformed XML; feedparser still salvages what entries it can
        logger.debug("Feed %s is malformed: %s", source.name, feed.get("bozo_exception"))

    items = [_to_item(entry) for entry in feed.get("entries") or []]
    logger.info("Source %s: %d entries", source.name, len(items))
    return items
