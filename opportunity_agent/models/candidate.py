from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

Category = Literal["regulation", "technology", "adoption", "events"]
Urgency = Literal["breaking", "timely", "evergreen"]

# Order matters: it is the tie-break priority for category scoring.
CATEGORIES: Tuple[str, ...] = ("regulation", "technology", "adoption", "events")
URGENCIES: Tuple[str, ...] = ("breaking", "timely", "evergreen")


@dataclass(frozen=True, slots=True)
class NewsCandidate:
    """A scored and categorized feed entry."""

    id: str
    title: str
    source: str
    link: str
    published_at: datetime
    relevance_score: int
    matched_keywords: Tuple[str, ...] = ()
    category: Category = "technology"
    urgency: Urgency = "evergreen"
    summary: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "source": self.source,
            "link": self.link,
            "published_at": self.published_at.isoformat(),
            "relevance_score": self.relevance_score,
            "matched_keywords": list(self.matched_keywords),
            "category": self.category,
            "urgency": self.urgency,
        }
