from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import schedule

from .fetchers import fetch_rss_entries
from .models import FeedSource, NewsCandidate, Opportunity, ScanRecord, ScanSummary
from .output.market_client import MarketClient, create_market_client
from .pipeline import FeedIngestor, PipelineState, identify_opportunities
from .processors.ai import OpportunityGenerator, create_generator
from .utils.logging import get_logger
from .utils.pipeline_config import PipelineConfig

logger = get_logger("oa.orchestrator")


class Orchestrator:
    """Runs scan cycles: ingest, generate, create markets, record history.

    ``scan()`` is the only cycle entry point; the scheduler thread and
    on-demand callers both go through it, so at most one cycle runs at a time.
    """

    def __init__(
        self,
        sources: Iterable[FeedSource],
        *,
        config: PipelineConfig | None = None,
        generator: OpportunityGenerator | None = None,
        market_client: MarketClient | None = None,
        dry_run: bool = False,
        fetcher: Callable = fetch_rss_entries,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or PipelineConfig()
        self.state = PipelineState.from_config(self.config)
        self.ingestor = FeedIngestor(sources, state=self.state, config=self.config, fetcher=fetcher)
        # Chosen once; never re-selected while the process runs
        self.generator = generator or create_generator(self.config)
        self._market_client = market_client
        self._dry_run = dry_run
        self._sleep = sleep
        self._scheduler = schedule.Scheduler()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def market_client(self) -> MarketClient:
        # Built on first use; generation-only callers need no market endpoint
        if self._market_client is None:
            self._market_client = create_market_client(dry_run=self._dry_run)
        return self._market_client

    # ---------------- Cycle -----------------
    def _candidates(self) -> List[NewsCandidate]:
        if self.config.use_demo_news:
            logger.info("Using demo news")
            return self.ingestor.ingest_demo()
        try:
            return self.ingestor.marketable(self.config.marketable_score)
        except Exception as exc:  # noqa: BLE001 - fall back to fixtures on unexpected ingest failure
            logger.exception("News ingestion failed, falling back to demo news: %s", exc)
            return self.ingestor.ingest_demo()

    def identify_opportunities(self, candidates: Iterable[NewsCandidate]) -> List[Opportunity]:
        cfg = self.config
        return identify_opportunities(
            candidates,
            self.generator,
            top_k=cfg.top_candidates,
            min_score=cfg.marketable_score,
            fallback_count=cfg.diverse_fallback_count,
        )

    def scan(self) -> ScanSummary:
        """Run one cycle unless one is already running.

        A concurrent trigger gets ``ScanSummary(busy=True)`` and leaves the
        history untouched. The state returns to Idle whatever happens inside.
        """
        if not self.state.try_begin_scan():
            logger.info("Scan already in progress; skipping trigger")
            return ScanSummary.busy_result()

        logger.info("Starting scan (generator=%s)", self.generator.name)
        try:
            candidates = self._candidates()
            opportunities = self.identify_opportunities(candidates)
            logger.info("Found %d candidates, %d opportunities", len(candidates), len(opportunities))

            selected = opportunities[: self.config.max_markets_per_scan]
            results = self.market_client.create_markets_batch(
                selected,
                delay_seconds=self.config.create_delay_seconds,
                sleep=self._sleep,
            )
            created = [ref for ref in results if ref]
            self.state.created_refs.extend(created)

            now = datetime.now(timezone.utc)
            self.state.last_scan_at = now
            self.state.history.append(
                ScanRecord(
                    timestamp=now,
                    candidates_found=len(candidates),
                    opportunities_found=len(opportunities),
                    opportunities_created=len(created),
                )
            )
            return ScanSummary(
                success=True,
                candidates_found=len(candidates),
                opportunities_found=len(opportunities),
                opportunities_created=len(created),
                created_refs=created,
            )
        except Exception as exc:  # noqa: BLE001 - a failed cycle must not stop the scheduler
            logger.exception("Scan failed: %s", exc)
            return ScanSummary(success=False, error=str(exc))
        finally:
            self.state.end_scan()

    # ---------------- Scheduling -----------------
    def _scheduled_scan(self) -> None:
        summary = self.scan()
        logger.info(
            "Scheduled scan done: success=%s busy=%s created=%d",
            summary.success,
            summary.busy,
            summary.opportunities_created,
        )

    def schedule_scans(self) -> None:
        self._scheduler.clear()
        self._scheduler.every(self.config.scan_interval_minutes).minutes.do(self._scheduled_scan)
        logger.info("Scheduled scanning enabled (every %d minutes)", self.config.scan_interval_minutes)

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    def run_forever(self, *, poll_seconds: float = 5.0) -> None:
        """Block, running scheduled scans until ``stop()`` is called."""
        if not self._scheduler.jobs:
            self.schedule_scans()
        while not self._stop.is_set():
            self._scheduler.run_pending()
            self._stop.wait(poll_seconds)

    def start(self, *, poll_seconds: float = 5.0) -> None:
        """Run the scheduler loop on a daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self.schedule_scans()
        self._thread = threading.Thread(
            target=self.run_forever,
            kwargs={"poll_seconds": poll_seconds},
            name="scan-scheduler",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = 10.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
        self._scheduler.clear()

    # ---------------- Queries -----------------
    def status(self) -> dict:
        next_run = self._scheduler.next_run if self._scheduler.jobs else None
        return {
            "state": "scanning" if self.state.scanning else "idle",
            "generator": self.generator.name,
            "last_scan_at": self.state.last_scan_at.isoformat() if self.state.last_scan_at else None,
            "next_scan_at": next_run.isoformat() if next_run else None,
            "markets_created": len(self.state.created_refs),
            "recent_markets": self.state.created_refs[-5:],
            "scan_history": [r.to_dict() for r in list(self.state.history)[-10:]],
            "ingestor": self.ingestor.status(),
        }

    def ingest(self) -> List[NewsCandidate]:
        # Shares the single-flight guard: ingestion mutates the dedup cache
        if not self.state.try_begin_scan():
            logger.info("Scan in progress; ingest request skipped")
            return []
        try:
            return self.ingestor.ingest()
        finally:
            self.state.end_scan()

    def ingest_demo(self) -> List[NewsCandidate]:
        return self.ingestor.ingest_demo()

    def recent_events(self, limit: int = 10) -> List[NewsCandidate]:
        return self.ingestor.recent_events(limit)

    def events_by_category(self, category: str, limit: int = 10) -> List[NewsCandidate]:
        return self.ingestor.events_by_category(category, limit)

    def urgent_events(self, limit: int = 5) -> List[NewsCandidate]:
        return self.ingestor.urgent_events(limit)
