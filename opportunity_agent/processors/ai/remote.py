from __future__ import annotations

from abc import abstractmethod
from typing import Optional

from ...models import NewsCandidate
from .base import OpportunityGenerator
from .parsing import DraftBounds, MarketDraft, parse_opportunity_response
from .prompts import build_news_prompt, build_topic_prompt
from .retry import with_retries


class RemoteGenerator(OpportunityGenerator):
    """Generator backed by a hosted LLM that answers a text prompt with JSON."""

    @abstractmethod
    def _complete(self, prompt: str) -> str:
        """Send ``prompt`` to the backend and return its text completion."""

    @property
    def bounds(self) -> DraftBounds:
        cfg = self.config
        return DraftBounds(
            min_duration_days=cfg.min_duration_days,
            max_duration_days=cfg.max_duration_days,
            min_liquidity=cfg.min_liquidity,
            max_liquidity=cfg.max_liquidity,
        )

    def _generate(self, prompt: str) -> MarketDraft:
        bounds = self.bounds
        # Malformed output is retried along with transport errors
        return with_retries(lambda: parse_opportunity_response(self._complete(prompt), bounds))

    def _draft_from_news(self, candidate: NewsCandidate) -> MarketDraft:
        return self._generate(build_news_prompt(candidate, self.bounds))

    def _draft_from_topic(self, topic: str, category: Optional[str]) -> MarketDraft:
        return self._generate(build_topic_prompt(topic, category, self.bounds))
