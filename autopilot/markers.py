from __future__ import annotations

import enum
import re
from typing import Any, Callable, Iterable

EASY_RUN_NAME = "Easy Run"


class ProcessedMarker(enum.Enum):
    """Closed set of title patterns this tool writes.

    A title matching any marker has already been rewritten and is left alone.
    New markers need a matcher in ``_MATCHERS``.
    """

    EASY_RUN = "easy_run"
    WEEK_TOTAL = "week_total"
    INTERVAL_HEADER = "interval_header"


_EASY_RUN_RE = re.compile(r"Easy Run", re.IGNORECASE)
_WEEK_TOTAL_RE = re.compile(r"Week Total:\s*", re.IGNORECASE)
_INTERVAL_HEADER_RE = re.compile(r"^\d+:\d{2}\s+x\s+\d+", re.IGNORECASE)

_MATCHERS: dict[ProcessedMarker, Callable[[str], bool]] = {
    ProcessedMarker.EASY_RUN: lambda name: bool(_EASY_RUN_RE.search(name)),
    ProcessedMarker.WEEK_TOTAL: lambda name: bool(_WEEK_TOTAL_RE.search(name)),
    ProcessedMarker.INTERVAL_HEADER: lambda name: bool(_INTERVAL_HEADER_RE.match(name)),
}


def matched_markers(name: str | None) -> list[ProcessedMarker]:
    if not name:
        return []
    return [marker for marker, matches in _MATCHERS.items() if matches(name)]


def is_already_renamed(name: str | None) -> bool:
    return bool(matched_markers(name))


def is_default_name(name: str | None, default_names: Iterable[str]) -> bool:
    if name is None:
        return False
    return name in set(default_names)


def looks_like_run(activity: dict[str, Any]) -> bool:
    for key in ("type", "sport_type"):
        value = activity.get(key)
        if isinstance(value, str) and "run" in value.lower():
            return True
    return False


def is_race(activity: dict[str, Any]) -> bool:
    return activity.get("workout_type") == 1
