from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

SourceType = Literal["rss"]


@dataclass(slots=True)
class FeedSource:
    """Configuration for a news feed source."""

    name: str
    url: str
    type: SourceType = "rss"
    keywords: List[str] = field(default_factory=list)
    weight: float = 1.0
