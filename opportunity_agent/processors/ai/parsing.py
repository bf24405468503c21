from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from ...models import CATEGORIES, URGENCIES


class OpportunityParseError(ValueError):
    """AI output could not be decoded into a valid market draft."""


@dataclass(frozen=True, slots=True)
class MarketDraft:
    question: str
    category: str
    urgency: str
    duration_days: int
    liquidity: float
    reasoning: str


@dataclass(frozen=True, slots=True)
class DraftBounds:
    min_duration_days: int = 1
    max_duration_days: int = 365
    min_liquidity: float = 500.0
    max_liquidity: float = 20000.0


def _number(obj: dict, *keys: str) -> float:
    for key in keys:
        if key in obj:
            val: Any = obj[key]
            if isinstance(val, bool):
                break
            try:
                return float(val)
            except (TypeError, ValueError) as exc:
                raise OpportunityParseError(f"Invalid '{key}': {val!r}") from exc
    raise OpportunityParseError(f"Missing numeric field '{keys[0]}'")


def parse_opportunity_response(raw: str, bounds: DraftBounds | None = None) -> MarketDraft:
    """Parse and validate a market JSON object from AI output.

    The first ``{...}`` block in ``raw`` is decoded, which tolerates code
    fences or prose around it. Expected keys: question, category, urgency,
    suggestedDurationDays, suggestedLiquidityUSDC (or suggestedLiquidity),
    reasoning.
    """
    bounds = bounds or DraftBounds()
    if not raw or not raw.strip():
        raise OpportunityParseError("Empty AI response")

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise OpportunityParseError("No JSON object found in AI response")
    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise OpportunityParseError(f"Malformed JSON in AI response: {exc}") from exc
    if not isinstance(obj, dict):
        raise OpportunityParseError("AI response JSON is not an object")

    question = obj.get("question")
    if not isinstance(question, str) or not question.strip():
        raise OpportunityParseError("'question' must be a non-empty string")
    question = question.strip()
    if not question.endswith("?"):
        question += "?"

    category = str(obj.get("category", "")).strip().lower()
    if category not in CATEGORIES:
        raise OpportunityParseError(f"Invalid category '{category}'")

    urgency = str(obj.get("urgency", "")).strip().lower()
    if urgency not in URGENCIES:
        raise OpportunityParseError(f"Invalid urgency '{urgency}'")

    duration = _number(obj, "suggestedDurationDays", "suggested_duration_days")
    if not (bounds.min_duration_days <= duration <= bounds.max_duration_days):
        raise OpportunityParseError(f"Duration out of range: {duration}")

    liquidity = _number(obj, "suggestedLiquidityUSDC", "suggestedLiquidity", "suggested_liquidity")
    if not (bounds.min_liquidity <= liquidity <= bounds.max_liquidity):
        raise OpportunityParseError(f"Liquidity out of range: {liquidity}")

    reasoning = obj.get("reasoning") or ""
    if not isinstance(reasoning, str):
        raise OpportunityParseError("'reasoning' must be a string")

    return MarketDraft(
        question=question,
        category=category,
        urgency=urgency,
        duration_days=int(round(duration)),
        liquidity=liquidity,
        reasoning=reasoning.strip(),
    )
