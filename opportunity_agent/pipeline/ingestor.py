from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from ..fetchers import RSSItem, fetch_rss_entries
from ..models import FeedSource, NewsCandidate
from ..processors import entry_id, score_relevance, to_plain_text, truncate_text
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig
from .state import PipelineState

logger = get_logger("oa.pipeline.ingestor")

Fetcher = Callable[..., List[RSSItem]]

SUMMARY_MAX_CHARS = 200


class FeedIngestor:
    """Fetches configured feeds and returns ranked, deduplicated candidates."""

    def __init__(
        self,
        sources: Iterable[FeedSource],
        *,
        state: PipelineState,
        config: PipelineConfig | None = None,
        fetcher: Fetcher = fetch_rss_entries,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.sources: List[FeedSource] = list(sources)
        self.state = state
        self.config = config or PipelineConfig()
        self.fetcher = fetcher
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ---------------- Fetching -----------------
    def _fetch_source(self, source: FeedSource) -> List[RSSItem]:
        try:
            return list(self.fetcher(source, timeout=self.config.fetch_timeout) or [])
        except Exception as exc:  # noqa: BLE001 - one bad feed must not abort the cycle
            logger.warning("Failed to fetch from %s: %s", source.name, exc)
            return []

    def _fetch_all(self) -> List[List[RSSItem]]:
        """Fetch every source concurrently; results keep the configured order."""
        if not self.sources:
            return []
        max_workers = min(8, len(self.sources))
        logger.debug("Fetching %d sources (workers=%d)", len(self.sources), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self._fetch_source, self.sources))

    # ---------------- Scoring -----------------
    def _process_source(self, source: FeedSource, items: Sequence[RSSItem]) -> List[NewsCandidate]:
        cfg = self.config
        kept: List[NewsCandidate] = []
        for item in list(items)[: cfg.entries_per_source]:
            item_id = entry_id(source.name, guid=item.guid, link=item.link, title=item.title)
            if self.state.dedup.has(item_id):
                continue

            published = item.published or self._clock()
            if published.tzinfo is None:
                published = published.replace(tzinfo=timezone.utc)
            title = to_plain_text(item.title) or "No title"
            body = to_plain_text(item.content or item.description)
            result = score_relevance(
                f"{title} {body}",
                source.keywords,
                source.weight,
                multiplier=cfg.score_multiplier,
            )
            # Registered even when below threshold so it is not rescored next cycle
            self.state.dedup.add(item_id)
            if result.score < cfg.min_relevance_score:
                logger.debug("Below threshold (%d): %s", result.score, title)
                continue

            kept.append(
                NewsCandidate(
                    id=item_id,
                    title=title,
                    summary=truncate_text(body, SUMMARY_MAX_CHARS),
                    source=source.name,
                    link=item.link or "",
                    published_at=published,
                    relevance_score=result.score,
                    matched_keywords=result.matched_keywords,
                    category=result.category,
                    urgency=result.urgency,
                )
            )
        return kept

    def _is_recent(self, cand: NewsCandidate, now: datetime) -> bool:
        return now - cand.published_at < timedelta(hours=self.config.recency_hours)

    # ---------------- Public API -----------------
    def ingest(self) -> List[NewsCandidate]:
        """Run one ingestion pass over all sources.

        Every candidate above the relevance threshold is remembered in the
        recent-events buffer; the return value is limited to recent items,
        best score first, at most ``max_candidates``.
        """
        fetched = self._fetch_all()
        merged: List[NewsCandidate] = []
        for source, items in zip(self.sources, fetched):
            kept = self._process_source(source, items)
            logger.info("Source %s: %d fetched, %d kept", source.name, len(items), len(kept))
            merged.extend(kept)

        self.state.remember_events(merged)

        now = self._clock()
        recent = [c for c in merged if self._is_recent(c, now)]
        recent.sort(key=lambda c: c.relevance_score, reverse=True)
        result = recent[: self.config.max_candidates]
        logger.info(
            "Ingest complete: candidates=%d recent=%d returned=%d dedup_size=%d",
            len(merged),
            len(recent),
            len(result),
            len(self.state.dedup),
        )
        return result

    def marketable(self, min_score: Optional[int] = None) -> List[NewsCandidate]:
        threshold = self.config.marketable_score if min_score is None else min_score
        return [c for c in self.ingest() if c.relevance_score >= threshold]

    def ingest_demo(self) -> List[NewsCandidate]:
        """Fixed candidates used when live fetching is disabled or fails."""
        now = self._clock()
        return [
            NewsCandidate(
                id="demo-1",
                title="SEC Considers New Privacy Coin Regulations",
                summary=(
                    "The Securities and Exchange Commission is reviewing a new framework for "
                    "privacy-focused cryptocurrencies amid growing regulatory scrutiny."
                ),
                source="Demo News",
                link="https://example.com/sec-privacy-regulations",
                published_at=now,
                relevance_score=85,
                matched_keywords=("privacy", "regulation", "sec"),
                category="regulation",
                urgency="timely",
            ),
            NewsCandidate(
                id="demo-2",
                title="Zero-Knowledge Proof Technology Adoption Surges 300% in DeFi",
                summary=(
                    "Major DeFi protocols are rapidly implementing ZK-proof technology to enhance "
                    "user privacy and transaction confidentiality."
                ),
                source="Demo News",
                link="https://example.com/zk-defi-surge",
                published_at=now - timedelta(hours=2),
                relevance_score=90,
                matched_keywords=("zero-knowledge", "zk-proof", "privacy", "confidential"),
                category="technology",
                urgency="breaking",
            ),
            NewsCandidate(
                id="demo-3",
                title="Solana Launches New Privacy Features for Enterprise Users",
                summary=(
                    "Solana Foundation announces confidential transactions and private smart "
                    "contracts for enterprise adoption."
                ),
                source="Demo News",
                link="https://example.com/solana-privacy-enterprise",
                published_at=now - timedelta(hours=4),
                relevance_score=80,
                matched_keywords=("solana privacy", "confidential", "private"),
                category="technology",
                urgency="timely",
            ),
            NewsCandidate(
                id="demo-4",
                title="Major Data Breach Affects 50M Users at Tech Giant",
                summary=(
                    "Security researchers confirm a massive data leak exposing personal "
                    "information of millions of users worldwide."
                ),
                source="Demo News",
                link="https://example.com/data-breach-millions",
                published_at=now - timedelta(hours=1),
                relevance_score=75,
                matched_keywords=("data breach", "leak", "privacy"),
                category="events",
                urgency="breaking",
            ),
            NewsCandidate(
                id="demo-5",
                title="Tornado Cash Developer's Appeal Gains Support from EFF",
                summary=(
                    "Electronic Frontier Foundation files amicus brief supporting privacy rights "
                    "in landmark crypto case."
                ),
                source="Demo News",
                link="https://example.com/tornado-cash-eff",
                published_at=now - timedelta(hours=3),
                relevance_score=95,
                matched_keywords=("tornado cash", "privacy", "sanctions"),
                category="regulation",
                urgency="breaking",
            ),
        ]

    # ---------------- Queries over recent events -----------------
    def recent_events(self, limit: int = 10) -> List[NewsCandidate]:
        return list(self.state.recent_events)[: max(0, limit)]

    def events_by_category(self, category: str, limit: int = 10) -> List[NewsCandidate]:
        matches = [e for e in self.state.recent_events if e.category == category]
        return matches[: max(0, limit)]

    def urgent_events(self, limit: int = 5) -> List[NewsCandidate]:
        matches = [e for e in self.state.recent_events if e.urgency in ("breaking", "timely")]
        return matches[: max(0, limit)]

    def status(self) -> dict:
        return {
            "sources_count": len(self.sources),
            "sources": [s.name for s in self.sources],
            "cached_events_count": len(self.state.recent_events),
            "seen_ids_count": len(self.state.dedup),
        }
