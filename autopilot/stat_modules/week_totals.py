from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import requests

from ..active_window import in_week_total_window
from ..markers import is_race, looks_like_run
from ..numeric_utils import as_float, meters_to_units


logger = logging.getLogger(__name__)

WEEK_PAGE_SIZE = 200
MAX_ACTIVITY_PAGES = 60
_WEEK_TOTAL_SUFFIX_RE = re.compile(r"\s*\(Week Total: [^)]+\)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class WeeklyTotal:
    total_distance_meters: float
    target_activity_id: int
    suffix_text: str
    current_name: str

    @property
    def already_applied(self) -> bool:
        return self.suffix_text in self.current_name

    @property
    def new_name(self) -> str:
        return append_week_total_suffix(self.current_name, self.suffix_text)


def _parse_datetime(activity: dict[str, Any]) -> datetime | None:
    raw = activity.get("start_date")
    if not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def start_of_week(moment: datetime, week_start: str = "monday") -> datetime:
    if week_start == "sunday":
        days_back = (moment.weekday() + 1) % 7
    else:
        days_back = moment.weekday()
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=days_back)


def previous_week_bounds(now_local: datetime, week_start: str = "monday") -> tuple[datetime, datetime]:
    current_week_start = start_of_week(now_local, week_start)
    return current_week_start - timedelta(days=7), current_week_start


def format_week_total_suffix(total_meters: float, unit: str) -> str:
    label = "mi" if unit == "mi" else "km"
    return f"(Week Total: {meters_to_units(total_meters, unit):.1f} {label})"


def append_week_total_suffix(name: str, suffix: str) -> str:
    cleaned = _WEEK_TOTAL_SUFFIX_RE.sub("", name).strip()
    return f"{cleaned} {suffix}".strip()


def select_week_total_target(activities: list[dict[str, Any]]) -> dict[str, Any] | None:
    dated: list[tuple[datetime, dict[str, Any]]] = []
    for activity in activities:
        start = _parse_datetime(activity)
        if start is not None:
            dated.append((start, activity))
    dated.sort(key=lambda item: item[0], reverse=True)
    for _start, activity in dated:
        if not is_race(activity):
            return activity
    return None


def compute_week_total(activities: list[dict[str, Any]], unit: str) -> WeeklyTotal | None:
    runs = [activity for activity in activities if looks_like_run(activity)]
    if not runs:
        return None
    total_meters = sum(as_float(activity.get("distance")) or 0.0 for activity in runs)
    target = select_week_total_target(runs)
    if target is None:
        return None
    return WeeklyTotal(
        total_distance_meters=total_meters,
        target_activity_id=int(target["id"]),
        suffix_text=format_week_total_suffix(total_meters, unit),
        current_name=str(target.get("name") or "Run"),
    )


def fetch_week_activities(
    client: Any,
    start: datetime,
    end: datetime,
    can_continue: Callable[[], bool],
    per_page: int = WEEK_PAGE_SIZE,
) -> list[dict[str, Any]] | None:
    """Page through the week's activities; None when a page fails or the read budget runs out."""
    activities: list[dict[str, Any]] = []
    page = 1
    while page <= MAX_ACTIVITY_PAGES:
        if not can_continue():
            logger.warning("Read budget exhausted while listing week activities (page %s).", page)
            return None
        try:
            batch = client.list_activities(start, end, page=page, per_page=per_page)
        except requests.RequestException as exc:
            logger.warning("Week total listing failed page %s: %s", page, exc)
            return None
        activities.extend(batch)
        if len(batch) < per_page:
            break
        page += 1
    else:
        logger.warning(
            "Week activities pagination hit cap (%s pages, per_page=%s). Results may be truncated.",
            MAX_ACTIVITY_PAGES,
            per_page,
        )
    return activities


def finalize_previous_week(ctx: Any) -> dict[str, Any]:
    settings = ctx.settings
    if not in_week_total_window(ctx.now_local, settings.active_hours_start):
        return {"status": "outside_window"}

    start, end = previous_week_bounds(ctx.now_local, settings.week_start)
    activities = fetch_week_activities(ctx.client, start, end, ctx.budget.try_consume_read)
    if activities is None:
        return {"status": "list_failed"}

    weekly = compute_week_total(activities, ctx.unit)
    if weekly is None:
        logger.info("No week total target between %s and %s.", start.date(), end.date())
        return {"status": "no_target"}
    if weekly.already_applied:
        logger.info("Week total already applied to %s.", weekly.target_activity_id)
        return {"status": "already_applied", "activity_id": weekly.target_activity_id}

    new_name = weekly.new_name
    if not ctx.rename(weekly.target_activity_id, {"name": new_name}):
        return {"status": "update_failed", "activity_id": weekly.target_activity_id}
    logger.info("Applied week total to %s: %s", weekly.target_activity_id, new_name)
    return {"status": "updated", "activity_id": weekly.target_activity_id, "name": new_name}
