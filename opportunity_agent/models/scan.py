from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class ScanRecord:
    timestamp: datetime
    candidates_found: int
    opportunities_found: int
    opportunities_created: int

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "candidates_found": self.candidates_found,
            "opportunities_found": self.opportunities_found,
            "opportunities_created": self.opportunities_created,
        }


@dataclass(slots=True)
class ScanSummary:
    """Result of one ``scan()`` call.

    ``busy`` is set when a cycle was already running; all counts are zero then.
    """

    success: bool
    candidates_found: int = 0
    opportunities_found: int = 0
    opportunities_created: int = 0
    created_refs: List[str] = field(default_factory=list)
    busy: bool = False
    error: Optional[str] = None

    @classmethod
    def busy_result(cls) -> "ScanSummary":
        return cls(success=False, busy=True)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "busy": self.busy,
            "candidates_found": self.candidates_found,
            "opportunities_found": self.opportunities_found,
            "opportunities_created": self.opportunities_created,
            "created_refs": list(self.created_refs),
            "error": self.error,
        }
