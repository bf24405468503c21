from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ...models import GenerationResult, NewsCandidate
from ...utils.logging import get_logger
from ...utils.pipeline_config import PipelineConfig
from .base import OpportunityGenerator
from .demo import demo_opportunities
from .parsing import MarketDraft

logger = get_logger("oa.ai.fallback")

DEFAULT_LIQUIDITY = 5000.0
_TITLE_MAX_CHARS = 60


def infer_category(text: str) -> str:
    """Keyword heuristic used when no category is known."""
    lower = text.lower()
    if any(kw in lower for kw in ("regulation", "law", "sec", "ban")):
        return "regulation"
    if any(kw in lower for kw in ("breach", "hack", "arrest")):
        return "events"
    if any(kw in lower for kw in ("adoption", "users", "growth")):
        return "adoption"
    return "technology"


def format_future_month(days_from_now: int, *, now: Optional[datetime] = None) -> str:
    """E.g. ``"March 2027"`` for the month ``days_from_now`` days ahead."""
    base = now or datetime.now(timezone.utc)
    return (base + timedelta(days=days_from_now)).strftime("%B %Y")


class FallbackGenerator(OpportunityGenerator):
    """Deterministic, credential-free generator driven by templates."""

    name = "fallback"

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(config)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _draft_from_news(self, candidate: NewsCandidate) -> MarketDraft:
        category = candidate.category
        urgency = candidate.urgency
        if urgency == "breaking":
            duration = 14
        elif category == "regulation":
            duration = 90
        else:
            duration = 30

        title = candidate.title.replace('"', "").replace("'", "")[:_TITLE_MAX_CHARS].strip()
        by_month = format_future_month(duration, now=self._clock())
        templates = {
            "regulation": f'Will regulatory action be taken regarding "{title}" by {by_month}?',
            "technology": f'Will "{title}" lead to significant protocol adoption within {duration} days?',
            "adoption": f'Will user metrics exceed expectations for "{title}" by {by_month}?',
            "events": f'Will there be follow-up legal or regulatory action on "{title}" within {duration} days?',
        }
        return MarketDraft(
            question=templates[category],
            category=category,
            urgency=urgency,
            duration_days=duration,
            liquidity=DEFAULT_LIQUIDITY,
            reasoning=f"Auto-generated from news: {candidate.title[:50]}",
        )

    def _draft_from_topic(self, topic: str, category: Optional[str]) -> MarketDraft:
        question = topic.strip()
        if not question.endswith("?"):
            question += "?"
        cat = category or infer_category(question)
        return MarketDraft(
            question=question,
            category=cat,
            urgency="timely",
            duration_days=90 if cat == "regulation" else 60,
            liquidity=DEFAULT_LIQUIDITY,
            reasoning=f"Generated from topic: {topic.strip()[:50]}",
        )

    def generate_diverse_markets(self, count: int = 5, *, substitute_demo: bool = True) -> List[GenerationResult]:
        # No backend to call; the curated set is the output
        logger.debug("Fallback generator returning %d demo markets", count)
        return [GenerationResult(success=True, opportunity=o) for o in demo_opportunities(count)]
