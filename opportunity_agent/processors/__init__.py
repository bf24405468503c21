"""Processing: normalization, relevance scoring, deduplication."""

from .normalize import clean_html_to_text, normalize_plain_text, to_plain_text, truncate_text
from .dedup import DedupCache, entry_id
from .scoring import RelevanceResult, score_relevance

__all__ = [
    "clean_html_to_text",
    "normalize_plain_text",
    "to_plain_text",
    "truncate_text",
    "DedupCache",
    "entry_id",
    "RelevanceResult",
    "score_relevance",
]
