"""Opportunity generation backends (Gemini, Anthropic, rule-based fallback)."""

from .base import GenerationError, OpportunityGenerator, confidence_from_score
from .factory import create_generator
from .parsing import OpportunityParseError

__all__ = [
    "GenerationError",
    "OpportunityGenerator",
    "OpportunityParseError",
    "confidence_from_score",
    "create_generator",
]
