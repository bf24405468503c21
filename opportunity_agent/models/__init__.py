"""Typed models used across the application."""

from .source import FeedSource, SourceType
from .candidate import CATEGORIES, URGENCIES, Category, NewsCandidate, Urgency
from .opportunity import GenerationResult, Opportunity, SourceRef
from .scan import ScanRecord, ScanSummary

__all__ = [
    "FeedSource",
    "SourceType",
    "CATEGORIES",
    "URGENCIES",
    "Category",
    "Urgency",
    "NewsCandidate",
    "Opportunity",
    "SourceRef",
    "GenerationResult",
    "ScanRecord",
    "ScanSummary",
]
