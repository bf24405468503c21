from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import requests

from ...models import CATEGORIES, GenerationResult, NewsCandidate, Opportunity, SourceRef
from ...utils.logging import get_logger
from ...utils.pipeline_config import PipelineConfig
from .demo import DIVERSE_TOPICS, demo_opportunities
from .parsing import MarketDraft

logger = get_logger("oa.ai.generator")

TOPIC_CONFIDENCE = 0.7
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.9


class GenerationError(Exception):
    """A generation backend failed to produce a usable opportunity."""


def confidence_from_score(relevance_score: float) -> float:
    """Map a 0-100 relevance score to a confidence clamped to [0.3, 0.9]."""
    return min(max(relevance_score / 100.0, MIN_CONFIDENCE), MAX_CONFIDENCE)


class OpportunityGenerator(ABC):
    """Turns news candidates or bare topics into market opportunities.

    Subclasses only produce a ``MarketDraft``; this class attaches the
    source reference and confidence, enforces the configured bounds, and
    implements batch generation.
    """

    name: str = "base"

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()

    @abstractmethod
    def _draft_from_news(self, candidate: NewsCandidate) -> MarketDraft:
        """Return a draft market for the given news candidate."""

    @abstractmethod
    def _draft_from_topic(self, topic: str, category: Optional[str]) -> MarketDraft:
        """Return a draft market for a bare topic string."""

    def generate_from_news(self, candidate: NewsCandidate) -> Opportunity:
        draft = self._draft_from_news(candidate)
        return self._finalize(
            draft,
            confidence=confidence_from_score(candidate.relevance_score),
            source_news=SourceRef(title=candidate.title, source=candidate.source, link=candidate.link),
        )

    def generate_from_topic(self, topic: str, category: Optional[str] = None) -> Opportunity:
        if category is not None and category not in CATEGORIES:
            raise ValueError(f"Unknown category '{category}'")
        draft = self._draft_from_topic(topic, category)
        return self._finalize(draft, confidence=TOPIC_CONFIDENCE, source_topic=topic)

    def _finalize(
        self,
        draft: MarketDraft,
        *,
        confidence: float,
        source_news: SourceRef | None = None,
        source_topic: str | None = None,
    ) -> Opportunity:
        cfg = self.config
        duration = min(max(int(draft.duration_days), cfg.min_duration_days), cfg.max_duration_days)
        liquidity = min(max(float(draft.liquidity), cfg.min_liquidity), cfg.max_liquidity)
        return Opportunity(
            question=draft.question,
            category=draft.category,
            urgency=draft.urgency,
            reasoning=draft.reasoning,
            suggested_duration_days=duration,
            suggested_liquidity=liquidity,
            confidence=min(max(confidence, 0.0), 1.0),
            source_news=source_news,
            source_topic=source_topic,
        )

    def generate_diverse_markets(self, count: int = 5, *, substitute_demo: bool = True) -> List[GenerationResult]:
        """Generate up to ``count`` opportunities from the built-in topic list.

        Each topic is attempted independently; a failure is recorded on its
        ``GenerationResult`` and the batch continues. If every attempt fails
        and ``substitute_demo`` is set, the curated demo opportunities are
        returned instead.
        """
        topics = DIVERSE_TOPICS[: max(0, count)]
        results: List[GenerationResult] = []
        for idx, topic in enumerate(topics):
            category = CATEGORIES[idx % len(CATEGORIES)]
            try:
                opp = self.generate_from_topic(topic, category)
            except (GenerationError, ValueError, requests.RequestException) as exc:
                logger.warning("Generation failed for topic '%s': %s", topic, exc)
                results.append(GenerationResult(success=False, error=str(exc), topic=topic))
                continue
            results.append(GenerationResult(success=True, opportunity=opp, topic=topic))

        failures = sum(1 for r in results if not r.success)
        if results and failures == len(results) and substitute_demo:
            logger.info("All %d generation attempts failed; using demo markets", failures)
            return [GenerationResult(success=True, opportunity=o) for o in demo_opportunities(count)]
        return results
