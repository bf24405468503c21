from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, List, Optional

from ..models import NewsCandidate, ScanRecord
from ..processors.dedup import DedupCache
from ..utils.pipeline_config import PipelineConfig


@dataclass
class PipelineState:
    """Process-lifetime state shared by the ingestor and the orchestrator.

    Only the scanning thread mutates the cache, ring buffer and history; the
    lock guards the single-flight flag alone.
    """

    dedup: DedupCache
    recent_events: Deque[NewsCandidate]
    history: Deque[ScanRecord]
    created_refs: List[str] = field(default_factory=list)
    last_scan_at: Optional[datetime] = None
    _scanning: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "PipelineState":
        return cls(
            dedup=DedupCache(config.dedup_max_size, evict_fraction=config.dedup_evict_fraction),
            recent_events=deque(maxlen=config.recent_events_capacity),
            history=deque(maxlen=config.history_capacity),
        )

    @property
    def scanning(self) -> bool:
        return self._scanning

    def try_begin_scan(self) -> bool:
        """Enter Scanning if Idle; ``False`` means a cycle is already running."""
        with self._lock:
            if self._scanning:
                return False
            self._scanning = True
            return True

    def end_scan(self) -> None:
        with self._lock:
            self._scanning = False

    def remember_events(self, candidates: List[NewsCandidate]) -> None:
        # Newest first; deque drops the oldest beyond capacity
        for cand in candidates:
            self.recent_events.appendleft(cand)
