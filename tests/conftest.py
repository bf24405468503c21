from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union

import pytest

from opportunity_agent.fetchers import RSSItem
from opportunity_agent.models import FeedSource, NewsCandidate
from opportunity_agent.utils.pipeline_config import PipelineConfig


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "GOOGLE_API_KEY",
        "ANTHROPIC_API_KEY",
        "GENERATION_BACKEND",
        "MARKET_API_URL",
        "MARKET_API_TOKEN",
        "USE_DEMO_NEWS",
        "AI_BACKOFF",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AI_RETRIES", "0")


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(create_delay_seconds=0)


@pytest.fixture
def make_item() -> Callable[..., RSSItem]:
    def _make(
        title: str,
        summary: str = "",
        *,
        guid: Optional[str] = None,
        link: Optional[str] = None,
        published: Optional[datetime] = None,
        age_hours: float = 1.0,
    ) -> RSSItem:
        return RSSItem(
            title=title,
            link=link if link is not None else "",
            guid=guid,
            description=summary,
            published=published or datetime.now(timezone.utc) - timedelta(hours=age_hours),
            content=None,
        )

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., NewsCandidate]:
    def _make(
        title: str = "Privacy coin news",
        *,
        score: int = 60,
        category: str = "technology",
        urgency: str = "timely",
        summary: Optional[str] = None,
        cid: Optional[str] = None,
    ) -> NewsCandidate:
        return NewsCandidate(
            id=cid or f"id-{title}",
            title=title,
            summary=summary,
            source="Test Feed",
            link="https://example.com/" + title.replace(" ", "-").lower(),
            published_at=datetime.now(timezone.utc),
            relevance_score=score,
            matched_keywords=("privacy",),
            category=category,
            urgency=urgency,
        )

    return _make


FeedResult = Union[List[RSSItem], Exception]


@pytest.fixture
def static_fetcher() -> Callable[[Dict[str, FeedResult]], Callable[..., List[RSSItem]]]:
    """Build a fetcher that serves canned entries (or raises) per source name."""

    def _build(feeds: Dict[str, FeedResult]):
        def _fetch(source: FeedSource, *, timeout: int = 10) -> List[RSSItem]:
            result = feeds.get(source.name, [])
            if isinstance(result, Exception):
                raise result
            return list(result)

        return _fetch

    return _build
