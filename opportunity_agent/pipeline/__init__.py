"""Scan-cycle building blocks: shared state, feed ingestion, opportunity selection."""

from .state import PipelineState
from .ingestor import FeedIngestor
from .opportunities import identify_opportunities

__all__ = ["PipelineState", "FeedIngestor", "identify_opportunities"]
