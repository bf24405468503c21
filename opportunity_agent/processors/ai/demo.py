"""Built-in topics and curated demo markets.

The demo list is the same length as the topic list so a batch of any size
up to ``len(DIVERSE_TOPICS)`` can be fully substituted.
"""

from __future__ import annotations

from typing import List, Tuple

from ...models import Opportunity

DIVERSE_TOPICS: Tuple[str, ...] = (
    "Will the US pass comprehensive crypto privacy legislation within the next 12 months?",
    "Will Solana privacy features reach 1M+ active users within a year?",
    "Will a top-10 exchange ship zero-knowledge proofs for trading within 6 months?",
    "Will the EU ban privacy coins on regulated exchanges before the AMLR deadline?",
    "Will the Tornado Cash developer appeal be decided in the developer's favor?",
    "Will enterprise adoption of confidential computing exceed 50% within two years?",
    "Will a single data breach affecting 100M+ users be disclosed this year?",
    "Will decentralized identity wallets reach 10M+ users within a year?",
    "Will any G7 country pass privacy-preserving AI regulation within 12 months?",
    "Will Token-2022 confidential transfers be enabled by a top-5 Solana DeFi protocol?",
)

# (question, category, urgency, duration_days, liquidity, reasoning)
_DEMO_MARKETS: Tuple[Tuple[str, str, str, int, float, str], ...] = (
    (
        "Will the SEC approve a privacy-focused crypto ETF within 6 months?",
        "regulation", "timely", 180, 10000.0,
        "High-impact regulatory decision affecting privacy coins",
    ),
    (
        "Will Solana's confidential token standard (Token-2022) see 1M+ transfers within 4 months?",
        "technology", "timely", 120, 8000.0,
        "Key adoption metric for Solana's privacy features",
    ),
    (
        "Will Tornado Cash sanctions be fully lifted within a year?",
        "regulation", "evergreen", 365, 15000.0,
        "Major precedent for privacy protocol regulation",
    ),
    (
        "Will a data breach affecting 100M+ users be disclosed within a year?",
        "events", "evergreen", 365, 5000.0,
        "Privacy market indicator based on breach frequency",
    ),
    (
        "Will zero-knowledge proof TVL exceed $10B across all chains within 5 months?",
        "adoption", "timely", 150, 12000.0,
        "Key metric for ZK technology adoption",
    ),
    (
        "Will the EU finalize a ban on anonymous crypto accounts within 9 months?",
        "regulation", "timely", 270, 9000.0,
        "AML rules directly target privacy-preserving wallets",
    ),
    (
        "Will a major L2 launch native shielded transfers on mainnet within 6 months?",
        "technology", "timely", 180, 7000.0,
        "Protocol-level privacy is the next scaling milestone",
    ),
    (
        "Will a privacy wallet surpass 5M monthly active users within a year?",
        "adoption", "evergreen", 365, 6000.0,
        "Tracks mainstream demand for private payments",
    ),
    (
        "Will a crypto mixer operator be arrested in a new jurisdiction within 3 months?",
        "events", "breaking", 90, 4000.0,
        "Enforcement actions against mixers continue to spread",
    ),
    (
        "Will fully homomorphic encryption run in a production DeFi protocol within a year?",
        "technology", "evergreen", 365, 8000.0,
        "FHE would enable private on-chain computation",
    ),
)

DEMO_CONFIDENCE = 0.75


def demo_opportunities(count: int | None = None) -> List[Opportunity]:
    markets = _DEMO_MARKETS if count is None else _DEMO_MARKETS[: max(0, count)]
    return [
        Opportunity(
            question=question,
            category=category,
            urgency=urgency,
            reasoning=reasoning,
            suggested_duration_days=duration,
            suggested_liquidity=liquidity,
            confidence=DEMO_CONFIDENCE,
            source_topic=question,
        )
        for question, category, urgency, duration, liquidity, reasoning in markets
    ]

