from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .candidate import CATEGORIES, URGENCIES, Category, Urgency


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Back-reference to the news item an opportunity was generated from."""

    title: str
    source: Optional[str] = None
    link: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Opportunity:
    """A generated yes/no market proposition ready for market creation.

    Exactly one of ``source_news`` and ``source_topic`` is set.
    """

    question: str
    category: Category
    urgency: Urgency
    reasoning: str
    suggested_duration_days: int
    suggested_liquidity: float
    confidence: float
    source_news: Optional[SourceRef] = None
    source_topic: Optional[str] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if (self.source_news is None) == (self.source_topic is None):
            raise ValueError("Opportunity needs exactly one of source_news or source_topic")
        if self.category not in CATEGORIES:
            raise ValueError(f"Invalid category '{self.category}'")
        if self.urgency not in URGENCIES:
            raise ValueError(f"Invalid urgency '{self.urgency}'")
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"Confidence out of range: {self.confidence}")

    @property
    def category_name(self) -> str:
        return self.category.capitalize()

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "category": self.category,
            "category_name": self.category_name,
            "urgency": self.urgency,
            "reasoning": self.reasoning,
            "suggested_duration_days": self.suggested_duration_days,
            "suggested_liquidity": self.suggested_liquidity,
            "confidence": self.confidence,
            "source_news": (
                {
                    "title": self.source_news.title,
                    "source": self.source_news.source,
                    "link": self.source_news.link,
                }
                if self.source_news
                else None
            ),
            "source_topic": self.source_topic,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(slots=True)
class GenerationResult:
    """Outcome of one generation attempt inside a batch."""

    success: bool
    opportunity: Optional[Opportunity] = None
    error: Optional[str] = None
    topic: Optional[str] = None
