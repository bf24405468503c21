from __future__ import annotations

from typing import Sequence

from ..models import Opportunity, ScanSummary


def format_scan_summary(summary: ScanSummary) -> str:
    if summary.busy:
        return "### Scan skipped\n\nA scan is already in progress.\n"
    lines = [
        "### Scan Summary",
        "",
        f"- Success: {'yes' if summary.success else 'no'}",
        f"- Candidates found: {summary.candidates_found}",
        f"- Opportunities found: {summary.opportunities_found}",
        f"- Markets created: {summary.opportunities_created}",
    ]
    if summary.created_refs:
        lines.append(f"- Market refs: {', '.join(summary.created_refs)}")
    if summary.error:
        lines.append(f"- Error: {summary.error}")
    return "\n".join(lines) + "\n"


def format_opportunities(opportunities: Sequence[Opportunity]) -> str:
    if not opportunities:
        return "(no opportunities)\n"
    blocks = []
    for idx, opp in enumerate(opportunities, start=1):
        origin = opp.source_news.title if opp.source_news else opp.source_topic
        blocks.append(
            f"{idx}. [{opp.category_name}/{opp.urgency}] {opp.question}\n"
            f"   duration={opp.suggested_duration_days}d liquidity={opp.suggested_liquidity:.0f} "
            f"confidence={opp.confidence:.2f}\n"
            f"   from: {origin}"
        )
    return "\n".join(blocks) + "\n"
