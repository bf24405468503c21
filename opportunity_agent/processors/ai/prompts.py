from __future__ import annotations

from typing import Optional

from ...models import NewsCandidate
from .parsing import DraftBounds

_MARKET_GENERATION_PROMPT = """You are an expert at creating prediction market questions for a privacy-focused prediction market.

Given news headlines or topics, generate relevant YES/NO prediction market questions that:
1. Are clearly verifiable with a definitive outcome
2. Focus on privacy, regulation, zero-knowledge proofs, encryption, data protection, or surveillance
3. Have appropriate timeframes ({min_days}-{max_days} days)
4. Are interesting enough to attract betting activity
5. Are NOT already obviously true or false

Categories to consider:
- regulation: Government policies, GDPR, privacy laws, sanctions
- technology: ZK protocols, encryption standards, privacy tools
- adoption: User growth, TVL milestones, enterprise adoption
- events: Breaches, scandals, conference announcements, court cases

Respond with a single JSON object only, no markdown formatting:
{{
  "question": "The yes/no question ending with ?",
  "category": "regulation|technology|adoption|events",
  "suggestedDurationDays": {min_days}-{max_days},
  "suggestedLiquidityUSDC": {min_liq}-{max_liq},
  "urgency": "breaking|timely|evergreen",
  "reasoning": "Brief explanation of why this is a good market"
}}"""

_CLOSING = "Create a compelling, verifiable YES/NO question that privacy-focused traders would want to bet on."


def _system_prompt(bounds: DraftBounds) -> str:
    return _MARKET_GENERATION_PROMPT.format(
        min_days=bounds.min_duration_days,
        max_days=bounds.max_duration_days,
        min_liq=int(bounds.min_liquidity),
        max_liq=int(bounds.max_liquidity),
    )


def build_news_prompt(candidate: NewsCandidate, bounds: DraftBounds) -> str:
    lines = ["Generate a prediction market question based on this news:", "", f"Title: {candidate.title}"]
    if candidate.summary:
        lines.append(f"Summary: {candidate.summary}")
    if candidate.source:
        lines.append(f"Source: {candidate.source}")
    lines += ["", _CLOSING]
    return _system_prompt(bounds) + "\n\n" + "\n".join(lines)


def build_topic_prompt(topic: str, category: Optional[str], bounds: DraftBounds) -> str:
    lines = [f"Generate a prediction market question about: {topic}"]
    if category:
        lines.append(f'Focus on the "{category}" category.')
    lines += ["", _CLOSING]
    return _system_prompt(bounds) + "\n\n" + "\n".join(lines)
