from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
WEEK_TOTAL_WINDOW_MINUTES = 30


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s'. Falling back to UTC.", name)
        return ZoneInfo("UTC")


def parse_time_hm(text: str | None) -> tuple[int, int] | None:
    if not isinstance(text, str):
        return None
    hour_text, sep, minute_text = text.strip().partition(":")
    if not sep:
        return None
    try:
        hour = int(hour_text)
        minute = int(minute_text)
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def _minutes(hm: tuple[int, int]) -> int:
    return hm[0] * 60 + hm[1]


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def is_within_active_hours(now_local: datetime, start: str, end: str) -> bool:
    start_hm = parse_time_hm(start)
    end_hm = parse_time_hm(end)
    if start_hm is None or end_hm is None:
        return True
    start_minutes = _minutes(start_hm)
    end_minutes = _minutes(end_hm)
    now_minutes = minutes_of_day(now_local)
    if start_minutes <= end_minutes:
        return start_minutes <= now_minutes <= end_minutes
    return now_minutes >= start_minutes or now_minutes <= end_minutes


def seconds_until_active_start(now_local: datetime, start: str, end: str) -> int:
    if is_within_active_hours(now_local, start, end):
        return 0
    start_hm = parse_time_hm(start)
    if start_hm is None:
        return 0
    window_start = now_local.replace(hour=start_hm[0], minute=start_hm[1], second=0, microsecond=0)
    if window_start <= now_local:
        window_start += timedelta(days=1)
    # Aware datetimes sharing a tzinfo subtract as wall time; go through UTC for DST nights.
    delta = int((window_start.astimezone(timezone.utc) - now_local.astimezone(timezone.utc)).total_seconds())
    return max(60, delta)


def minutes_since_window_start(now_local: datetime, start: str) -> int:
    start_hm = parse_time_hm(start)
    start_minutes = _minutes(start_hm) if start_hm else 0
    return (minutes_of_day(now_local) - start_minutes) % MINUTES_PER_DAY


def in_week_total_window(now_local: datetime, start: str, window_minutes: int = WEEK_TOTAL_WINDOW_MINUTES) -> bool:
    return minutes_since_window_start(now_local, start) <= window_minutes
