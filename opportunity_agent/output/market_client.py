from __future__ import annotations

import hashlib
import os
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

import requests

from ..models import Opportunity
from ..utils.logging import get_logger

logger = get_logger("oa.output.market")


class MarketCreationError(Exception):
    """The market service rejected or failed to create a market."""


class MarketClient(ABC):
    """Creates a market for an opportunity and returns its identifier."""

    @abstractmethod
    def create_market(self, opportunity: Opportunity) -> str:
        """Create the market; raise on failure."""

    def create_markets_batch(
        self,
        opportunities: Iterable[Opportunity],
        *,
        delay_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> List[Optional[str]]:
        """Create markets one at a time with a fixed pause between calls.

        A failed creation is logged and recorded as ``None``; the remaining
        opportunities are still attempted.
        """
        items = list(opportunities)
        results: List[Optional[str]] = []
        for idx, opp in enumerate(items):
            try:
                ref = self.create_market(opp)
                logger.info("Created market %s: %s", ref, opp.question[:60])
                results.append(ref)
            except (MarketCreationError, requests.RequestException) as exc:
                logger.error("Market creation failed for '%s': %s", opp.question[:60], exc)
                results.append(None)
            if delay_seconds and idx + 1 < len(items):
                sleep(delay_seconds)
        return results


def market_end_time(opportunity: Opportunity, *, now: Optional[datetime] = None) -> datetime:
    base = now or datetime.now(timezone.utc)
    return base + timedelta(days=opportunity.suggested_duration_days)


class DryRunMarketClient(MarketClient):
    """Logs the planned market and returns a deterministic placeholder id."""

    def __init__(self) -> None:
        self.created: List[Opportunity] = []

    def create_market(self, opportunity: Opportunity) -> str:
        digest = hashlib.sha1(opportunity.question.encode("utf-8")).hexdigest()[:12]
        logger.info(
            "[DRY-RUN] Would create market: question=%s duration=%sd liquidity=%.0f",
            opportunity.question,
            opportunity.suggested_duration_days,
            opportunity.suggested_liquidity,
        )
        self.created.append(opportunity)
        return f"dry-run-{digest}"


class HTTPMarketClient(MarketClient):
    """Posts opportunities to the market service's REST endpoint.

    Environment:
      - MARKET_API_URL (required): endpoint accepting a JSON market definition
      - MARKET_API_TOKEN (optional): sent as a bearer token
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: int = 30,
        max_attempts: int = 3,
        backoff: float = 1.5,
    ) -> None:
        self.url = url or os.environ.get("MARKET_API_URL")
        if not self.url:
            raise RuntimeError("MARKET_API_URL not set and dry_run=False")
        self.token = token or os.environ.get("MARKET_API_TOKEN")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff

    def _payload(self, opportunity: Opportunity) -> dict:
        return {
            "question": opportunity.question,
            "durationDays": opportunity.suggested_duration_days,
            "endTime": int(market_end_time(opportunity).timestamp()),
            "initialLiquidity": opportunity.suggested_liquidity,
            "category": opportunity.category,
        }

    def create_market(self, opportunity: Opportunity) -> str:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        payload = self._payload(opportunity)

        for attempt in range(self.max_attempts):
            resp = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            if resp.status_code == 429 or resp.status_code >= 500:
                delay = self.backoff ** attempt
                logger.warning("Market API returned %s; retrying in %.1fs", resp.status_code, delay)
                time.sleep(delay)
                continue
            if resp.status_code >= 400:
                raise MarketCreationError(f"Market API error {resp.status_code}: {resp.text[:200]}")
            data = resp.json()
            if not isinstance(data, dict):
                raise MarketCreationError("Market API response is not a JSON object")
            ref = data.get("market") or data.get("id") or data.get("address")
            if not ref:
                raise MarketCreationError("Market API response has no market identifier")
            return str(ref)
        raise MarketCreationError(f"Failed to create market after {self.max_attempts} attempts")


def create_market_client(*, dry_run: bool = False) -> MarketClient:
    if dry_run:
        return DryRunMarketClient()
    return HTTPMarketClient()
