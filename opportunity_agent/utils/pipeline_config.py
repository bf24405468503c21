from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class PipelineConfig:
    """Tunable thresholds and limits for one scan cycle and the scheduler.

    Defaults are the production values; ``from_env`` lets every field be
    overridden with a ``PIPELINE_*`` environment variable.
    """

    # Ingestion
    min_relevance_score: int = 20
    recency_hours: int = 24
    max_candidates: int = 15
    entries_per_source: int = 20
    fetch_timeout: int = 10
    score_multiplier: float = 10.0
    use_demo_news: bool = False

    # Process-lifetime state
    dedup_max_size: int = 10000
    dedup_evict_fraction: float = 0.5
    recent_events_capacity: int = 100
    history_capacity: int = 50

    # Opportunity selection and market creation
    marketable_score: int = 30
    top_candidates: int = 3
    diverse_fallback_count: int = 3
    max_markets_per_scan: int = 2
    create_delay_seconds: float = 5.0
    scan_interval_minutes: int = 120

    # Bounds enforced on generated opportunities
    min_duration_days: int = 1
    max_duration_days: int = 365
    min_liquidity: float = 500.0
    max_liquidity: float = 20000.0

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        d = cls()
        return cls(
            min_relevance_score=int(os.getenv("PIPELINE_MIN_RELEVANCE_SCORE", d.min_relevance_score)),
            recency_hours=int(os.getenv("PIPELINE_RECENCY_HOURS", d.recency_hours)),
            max_candidates=int(os.getenv("PIPELINE_MAX_CANDIDATES", d.max_candidates)),
            entries_per_source=int(os.getenv("PIPELINE_ENTRIES_PER_SOURCE", d.entries_per_source)),
            fetch_timeout=int(os.getenv("PIPELINE_FETCH_TIMEOUT", d.fetch_timeout)),
            score_multiplier=float(os.getenv("PIPELINE_SCORE_MULTIPLIER", d.score_multiplier)),
            use_demo_news=_env_bool("USE_DEMO_NEWS", d.use_demo_news),
            dedup_max_size=int(os.getenv("PIPELINE_DEDUP_MAX_SIZE", d.dedup_max_size)),
            dedup_evict_fraction=float(os.getenv("PIPELINE_DEDUP_EVICT_FRACTION", d.dedup_evict_fraction)),
            recent_events_capacity=int(os.getenv("PIPELINE_RECENT_EVENTS", d.recent_events_capacity)),
            history_capacity=int(os.getenv("PIPELINE_HISTORY_CAPACITY", d.history_capacity)),
            marketable_score=int(os.getenv("PIPELINE_MARKETABLE_SCORE", d.marketable_score)),
            top_candidates=int(os.getenv("PIPELINE_TOP_CANDIDATES", d.top_candidates)),
            diverse_fallback_count=int(os.getenv("PIPELINE_DIVERSE_FALLBACK_COUNT", d.diverse_fallback_count)),
            max_markets_per_scan=int(os.getenv("PIPELINE_MAX_MARKETS_PER_SCAN", d.max_markets_per_scan)),
            create_delay_seconds=float(os.getenv("PIPELINE_CREATE_DELAY_SECONDS", d.create_delay_seconds)),
            scan_interval_minutes=int(os.getenv("PIPELINE_SCAN_INTERVAL_MINUTES", d.scan_interval_minutes)),
            min_duration_days=int(os.getenv("PIPELINE_MIN_DURATION_DAYS", d.min_duration_days)),
            max_duration_days=int(os.getenv("PIPELINE_MAX_DURATION_DAYS", d.max_duration_days)),
            min_liquidity=float(os.getenv("PIPELINE_MIN_LIQUIDITY", d.min_liquidity)),
            max_liquidity=float(os.getenv("PIPELINE_MAX_LIQUIDITY", d.max_liquidity)),
        )
