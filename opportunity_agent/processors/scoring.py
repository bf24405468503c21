"""Keyword relevance scoring for privacy / crypto news.

Pure functions only: text in, score and labels out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..models.candidate import CATEGORIES, Category, Urgency

# Weights run 1.0-3.0; protocol- and cryptography-specific terms weigh most.
PRIVACY_KEYWORDS: Dict[str, float] = {
    # Privacy technology
    "zero-knowledge": 3.0,
    "zk-proof": 3.0,
    "zk-snark": 3.0,
    "zk-stark": 3.0,
    "zkrollup": 3.0,
    "confidential": 2.5,
    "encryption": 2.5,
    "encrypted": 2.5,
    "privacy-preserving": 3.0,
    "private transaction": 3.0,
    # Privacy protocols
    "tornado cash": 3.0,
    "zcash": 2.5,
    "monero": 2.5,
    "light protocol": 3.0,
    "elusiv": 3.0,
    "aztec": 2.5,
    "railgun": 2.5,
    "secret network": 2.5,
    # Regulatory
    "gdpr": 2.0,
    "privacy law": 2.5,
    "data protection": 2.0,
    "surveillance": 2.5,
    "sanctions": 2.0,
    "ofac": 2.5,
    "compliance": 1.5,
    "kyc": 1.5,
    "aml": 1.5,
    # General privacy
    "privacy": 1.5,
    "anonymous": 2.0,
    "anonymity": 2.0,
    "pseudonymous": 1.5,
    "private": 1.0,
    "mixer": 2.0,
    "mixing": 2.0,
    "shielded": 2.5,
    # Compute
    "homomorphic": 3.0,
    "mpc": 2.5,
    "secure enclave": 2.0,
    "tee": 2.0,
    "trusted execution": 2.0,
    # Incidents
    "data breach": 2.5,
    "leak": 1.5,
    "hack": 1.5,
    "compromised": 1.5,
    # Solana
    "solana privacy": 3.0,
    "spl confidential": 3.0,
    "token-2022 confidential": 3.0,
}

CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "regulation": (
        "law", "regulation", "gdpr", "sanctions", "ofac", "compliance",
        "legislation", "ban", "restrict", "sec", "cftc",
    ),
    "technology": (
        "zk", "protocol", "launch", "release", "upgrade", "mainnet",
        "testnet", "tvl", "smart contract", "proof",
    ),
    "adoption": (
        "users", "growth", "adoption", "enterprise", "mainstream",
        "wallet", "integration", "partnership",
    ),
    "events": (
        "breach", "hack", "leak", "scandal", "arrest", "raid",
        "lawsuit", "verdict", "court",
    ),
}

BREAKING_KEYWORDS: Tuple[str, ...] = (
    "breaking", "just in", "urgent", "alert", "confirmed", "arrested", "breached",
)
TIMELY_KEYWORDS: Tuple[str, ...] = (
    "announces", "launches", "releases", "proposes", "reaches", "exceeds", "surpasses",
)

DEFAULT_CATEGORY: Category = "technology"
MAX_SCORE = 100


@dataclass(frozen=True, slots=True)
class RelevanceResult:
    score: int
    matched_keywords: Tuple[str, ...]
    category: Category
    urgency: Urgency


def determine_category(text: str) -> Category:
    """Category with the most keyword hits; earlier categories win ties."""
    lower = text.lower()
    best: Category = DEFAULT_CATEGORY
    best_hits = 0
    for category in CATEGORIES:
        hits = sum(1 for kw in CATEGORY_KEYWORDS[category] if kw in lower)
        if hits > best_hits:
            best, best_hits = category, hits
    return best


def determine_urgency(text: str) -> Urgency:
    lower = text.lower()
    if any(kw in lower for kw in BREAKING_KEYWORDS):
        return "breaking"
    if any(kw in lower for kw in TIMELY_KEYWORDS):
        return "timely"
    return "evergreen"


def score_relevance(
    text: str,
    source_keywords: Iterable[str] = (),
    source_weight: float = 1.0,
    *,
    multiplier: float = 10.0,
    source_keyword_points: float = 5.0,
) -> RelevanceResult:
    """Score ``text`` against the privacy keyword table.

    Each table keyword found (case-insensitive substring) adds
    ``weight * multiplier``. Each source keyword found that is not already
    among the matched terms adds ``source_keyword_points``. The sum is scaled
    by ``source_weight``, rounded, and clamped to ``[0, 100]``.
    """
    lower = (text or "").lower()
    raw = 0.0
    matched: List[str] = []
    seen: set[str] = set()

    for keyword, weight in PRIVACY_KEYWORDS.items():
        if keyword in lower:
            raw += weight * multiplier
            matched.append(keyword)
            seen.add(keyword)

    for keyword in source_keywords:
        key = keyword.strip().lower()
        if not key or key in seen:
            continue
        if key in lower:
            raw += source_keyword_points
            matched.append(keyword.strip())
            seen.add(key)

    score = int(round(raw * source_weight))
    score = max(0, min(MAX_SCORE, score))

    return RelevanceResult(
        score=score,
        matched_keywords=tuple(matched),
        category=determine_category(lower),
        urgency=determine_urgency(lower),
    )
