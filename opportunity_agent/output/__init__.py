"""Downstream collaborators: market creation and human-readable reports."""

from .market_client import (
    DryRunMarketClient,
    HTTPMarketClient,
    MarketClient,
    MarketCreationError,
    create_market_client,
)
from .scan_reporter import format_opportunities, format_scan_summary

__all__ = [
    "DryRunMarketClient",
    "HTTPMarketClient",
    "MarketClient",
    "MarketCreationError",
    "create_market_client",
    "format_opportunities",
    "format_scan_summary",
]
