from __future__ import annotations

from typing import Iterable, List

import requests

from ..models import NewsCandidate, Opportunity
from ..processors.ai import GenerationError, OpportunityGenerator
from ..utils.logging import get_logger

logger = get_logger("oa.pipeline.opportunities")


def identify_opportunities(
    candidates: Iterable[NewsCandidate],
    generator: OpportunityGenerator,
    *,
    top_k: int = 3,
    min_score: int = 30,
    fallback_count: int = 3,
) -> List[Opportunity]:
    """Generate opportunities from the best candidates.

    Only the first ``top_k`` candidates are considered, and of those only the
    ones scoring above ``min_score``. A candidate whose generation fails is
    logged and dropped. When nothing comes out, ``fallback_count`` diverse
    markets are generated instead so a cycle still produces output.
    """
    opportunities: List[Opportunity] = []
    for cand in list(candidates)[:top_k]:
        if cand.relevance_score <= min_score:
            continue
        try:
            opp = generator.generate_from_news(cand)
        except (GenerationError, ValueError, requests.RequestException) as exc:
            logger.error("Generation failed for '%s': %s", cand.title, exc)
            continue
        logger.info("Generated market: %s", opp.question[:80])
        opportunities.append(opp)

    if opportunities:
        return opportunities

    logger.info("No news-based markets; generating %d diverse markets", fallback_count)
    for result in generator.generate_diverse_markets(fallback_count):
        if result.success and result.opportunity is not None:
            opportunities.append(result.opportunity)
        else:
            logger.warning("Diverse market failed for topic '%s': %s", result.topic, result.error)
    return opportunities
