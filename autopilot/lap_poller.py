from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import requests


logger = logging.getLogger(__name__)


class PollOutcome(enum.Enum):
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class LapPollResult:
    outcome: PollOutcome
    attempts: int
    laps: list[dict[str, Any]] | None = None


def max_attempts_for(interval_seconds: float, max_minutes: float) -> int:
    interval_ms = max(1, int(interval_seconds * 1000))
    return max(1, int((max_minutes * 60 * 1000) // interval_ms))


def poll_laps(
    fetch_laps: Callable[[int], Any],
    activity_id: int,
    *,
    interval_seconds: float,
    max_minutes: float,
    can_continue: Callable[[], bool],
    sleep: Callable[[float], None] = time.sleep,
    reads_left: Callable[[], bool] = lambda: True,
) -> LapPollResult:
    """Fetch laps until Strava has them or the time/read budget runs out.

    Failed requests and empty lap lists are both treated as "not ready yet".
    ``can_continue`` is asked before every attempt and may stop the loop even
    when attempts remain. ``reads_left`` is checked before sleeping so a spent
    budget ends the poll without waiting out another interval.
    """
    attempts = max_attempts_for(interval_seconds, max_minutes)
    made = 0
    for attempt in range(1, attempts + 1):
        if not can_continue():
            logger.info("Read budget denied laps attempt %s for %s.", attempt, activity_id)
            break
        made = attempt
        try:
            laps = fetch_laps(activity_id)
        except requests.RequestException as exc:
            logger.info("laps attempt %s for %s failed (%s); will retry.", attempt, activity_id, exc)
        else:
            if isinstance(laps, list) and laps:
                return LapPollResult(PollOutcome.SUCCESS, attempts=made, laps=laps)
            logger.info("laps attempt %s for %s empty; will retry.", attempt, activity_id)
        if attempt >= attempts:
            break
        if not reads_left():
            logger.info("No reads left for laps of %s; not waiting.", activity_id)
            break
        sleep(interval_seconds)
    return LapPollResult(PollOutcome.EXHAUSTED, attempts=made)


def fetch_laps_with_retry(
    fetch_laps: Callable[[int], Any],
    activity_id: int,
    *,
    interval_seconds: float,
    max_minutes: float,
    can_continue: Callable[[], bool],
    sleep: Callable[[float], None] = time.sleep,
    reads_left: Callable[[], bool] = lambda: True,
) -> list[dict[str, Any]] | None:
    result = poll_laps(
        fetch_laps,
        activity_id,
        interval_seconds=interval_seconds,
        max_minutes=max_minutes,
        can_continue=can_continue,
        sleep=sleep,
        reads_left=reads_left,
    )
    return result.laps
