from __future__ import annotations

import hashlib
from typing import Dict, Iterator, Optional

from ..utils.logging import get_logger

logger = get_logger("oa.processors.dedup")


class DedupCache:
    """Bounded, insertion-ordered set of feed item ids already processed.

    Eviction is batched: once the size exceeds ``max_size`` the oldest ids
    are dropped in one go so that ``max_size - int(max_size * evict_fraction)``
    of the newest remain. An evicted id is treated as new if it shows up
    again. Nothing is persisted; a restart starts from an empty cache.
    """

    def __init__(self, max_size: int = 10000, *, evict_fraction: float = 0.5) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if not (0.0 < evict_fraction <= 1.0):
            raise ValueError("evict_fraction must be in (0, 1]")
        self.max_size = max_size
        self.evict_fraction = evict_fraction
        # dict keeps insertion order; values unused
        self._ids: Dict[str, None] = {}

    def has(self, item_id: str) -> bool:
        return item_id in self._ids

    def add(self, item_id: str) -> None:
        if item_id in self._ids:
            return
        self._ids[item_id] = None
        if len(self._ids) > self.max_size:
            self._evict()

    def _evict(self) -> None:
        keep = max(1, self.max_size - int(self.max_size * self.evict_fraction))
        drop = len(self._ids) - keep
        it = iter(self._ids)
        stale = [next(it) for _ in range(drop)]
        for item_id in stale:
            del self._ids[item_id]
        logger.debug("Dedup cache evicted %d ids (kept %d)", drop, keep)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)


def entry_id(source_name: str, *, guid: Optional[str], link: Optional[str], title: str) -> str:
    """Stable id for a feed entry: guid, else permalink, else a title hash."""
    if guid and guid.strip():
        return guid.strip()
    if link and link.strip():
        return link.strip()
    digest = hashlib.sha1((title or "").strip().lower().encode("utf-8")).hexdigest()[:16]
    return f"{source_name}-{digest}"
