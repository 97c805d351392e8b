from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import requests

from .config import Settings
from .numeric_utils import PaceRange


logger = logging.getLogger(__name__)


class ReadBudget:
    """Process-wide ceiling on Strava read calls for one run.

    Every read (listing page, activity detail, lap attempt) asks for a slot
    first; writes are never counted.
    """

    def __init__(self, max_reads: int):
        self.max_reads = max(0, int(max_reads))
        self.reads_used = 0

    @property
    def remaining(self) -> int:
        return max(0, self.max_reads - self.reads_used)

    @property
    def exhausted(self) -> bool:
        return self.reads_used >= self.max_reads

    def try_consume_read(self) -> bool:
        if self.exhausted:
            return False
        self.reads_used += 1
        return True

    def snapshot(self) -> dict[str, int]:
        return {"max_reads": self.max_reads, "reads_used": self.reads_used, "reads_remaining": self.remaining}


@dataclass
class RunContext:
    settings: Settings
    client: Any
    budget: ReadBudget
    pace_range: PaceRange
    now_local: datetime
    dry_run: bool = False
    updated: list[dict[str, Any]] = field(default_factory=list)

    @property
    def unit(self) -> str:
        return self.settings.unit_system

    def rename(self, activity_id: int, payload: dict[str, Any]) -> bool:
        if self.dry_run:
            logger.info("Dry run: would update %s with %s", activity_id, payload)
            self.updated.append({"activity_id": activity_id, **payload})
            return True
        try:
            self.client.update_activity(activity_id, payload)
        except requests.RequestException as exc:
            logger.warning("Failed to update %s: %s", activity_id, exc)
            return False
        self.updated.append({"activity_id": activity_id, **payload})
        return True
