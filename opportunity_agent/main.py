"""Application entrypoint for the news-to-market opportunity agent.

Modes:
1) single scan (default): ingest, generate, create up to N markets
2) --daemon: run scans on a fixed interval until interrupted
3) helpers: --ingest-only, --topic, --diverse, --status
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import requests
from dotenv import load_dotenv

from .models import CATEGORIES
from .orchestrator import Orchestrator
from .output.scan_reporter import format_opportunities, format_scan_summary
from .processors.ai import GenerationError
from .utils.config_loader import load_sources_config
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="News-to-market opportunity agent - ingest feeds and draft prediction markets"
    )
    parser.add_argument(
        "--config",
        default="config/sources.yaml",
        help="Path to feed sources configuration file (YAML)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log planned markets instead of calling the market service",
    )
    parser.add_argument(
        "--demo-news",
        action="store_true",
        help="Use built-in demo news instead of fetching feeds",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL env or INFO)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--daemon",
        action="store_true",
        help="Run an initial scan, then scan on the configured interval",
    )
    mode.add_argument(
        "--ingest-only",
        action="store_true",
        help="Fetch and score feeds, print candidates and exit",
    )
    mode.add_argument(
        "--topic",
        default=None,
        help="Generate one opportunity from a topic and exit",
    )
    mode.add_argument(
        "--diverse",
        type=int,
        default=None,
        metavar="N",
        help="Generate N opportunities from the built-in topic list and exit",
    )
    mode.add_argument(
        "--status",
        action="store_true",
        help="Print the agent status snapshot and exit",
    )
    parser.add_argument(
        "--category",
        default=None,
        choices=list(CATEGORIES),
        help="Category for --topic",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of text reports",
    )
    return parser.parse_args(argv)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("oa.agent")

    config_path = Path(args.config)
    logger.info("Loading sources configuration from %s", config_path)
    try:
        sources = load_sources_config(config_path)
    except Exception as exc:  # noqa: BLE001 - top-level entrypoint guard
        logger.exception("Failed to load configuration: %s", exc)
        return 1
    logger.info("Loaded %d source(s)", len(sources))

    config = PipelineConfig.from_env()
    if args.demo_news:
        config.use_demo_news = True

    try:
        agent = Orchestrator(sources, config=config, dry_run=args.dry_run)
    except (RuntimeError, ValueError) as exc:
        logger.error("Failed to initialize agent: %s", exc)
        return 1

    if args.status:
        _print_json(agent.status())
        return 0

    if args.ingest_only:
        candidates = agent.ingest_demo() if config.use_demo_news else agent.ingest()
        _print_json([c.to_dict() for c in candidates])
        return 0

    if args.topic:
        try:
            opp = agent.generator.generate_from_topic(args.topic, args.category)
        except (GenerationError, ValueError, requests.RequestException) as exc:
            logger.error("Failed to generate a market for topic '%s': %s", args.topic, exc)
            return 1
        if args.json:
            _print_json(opp.to_dict())
        else:
            print(format_opportunities([opp]), end="")
        return 0

    if args.diverse is not None:
        results = agent.generator.generate_diverse_markets(args.diverse)
        opportunities = [r.opportunity for r in results if r.success and r.opportunity]
        if args.json:
            _print_json([o.to_dict() for o in opportunities])
        else:
            print(format_opportunities(opportunities), end="")
        return 0

    # Scan modes need the market service; fail at startup rather than mid-cycle
    try:
        agent.market_client
    except RuntimeError as exc:
        logger.error("Failed to initialize market client: %s", exc)
        return 1

    if args.daemon:
        summary = agent.scan()
        logger.info("Initial scan: %s", summary.to_dict())
        try:
            agent.run_forever()
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
        return 0

    summary = agent.scan()
    if args.json:
        _print_json(summary.to_dict())
    else:
        print(format_scan_summary(summary), end="")
    return 0 if summary.success else 2


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
