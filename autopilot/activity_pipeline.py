from __future__ import annotations

import argparse
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

import requests

from .active_window import is_within_active_hours, resolve_timezone
from .config import Settings
from .lap_poller import fetch_laps_with_retry
from .laps import laps_from_strava
from .markers import EASY_RUN_NAME, is_already_renamed, is_default_name, is_race, looks_like_run
from .numeric_utils import PaceRange
from .run_context import ReadBudget, RunContext
from .stat_modules.heart_rate import format_avg_hr_description
from .stat_modules.week_totals import finalize_previous_week
from .storage import write_json
from .strava_client import StravaClient
from .workout import build_workout_description


logger = logging.getLogger(__name__)

TODAY_PAGE_SIZE = 50


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def build_update(
    activity: dict[str, Any],
    laps: list[dict[str, Any]],
    pace_range: PaceRange,
    settings: Settings,
) -> dict[str, Any]:
    workout = build_workout_description(laps_from_strava(laps), pace_range, settings.unit_system)
    if workout is not None:
        return workout.as_update_payload()
    return {
        "name": EASY_RUN_NAME,
        "description": format_avg_hr_description(activity.get("average_heartrate"), settings.max_hr),
    }


def _process_activity(
    ctx: RunContext,
    summary: dict[str, Any],
    *,
    sleep: Callable[[float], None],
) -> str:
    settings = ctx.settings
    if not looks_like_run(summary):
        return "not_run"
    if is_already_renamed(summary.get("name")):
        return "already_renamed"
    if not is_default_name(summary.get("name"), settings.default_run_names):
        return "not_default_name"

    activity_id = int(summary["id"])
    if not ctx.budget.try_consume_read():
        return "budget_exhausted"
    try:
        detail = ctx.client.get_activity_details(activity_id)
    except requests.RequestException as exc:
        logger.warning("Skipping %s: failed to get details (%s)", activity_id, exc)
        return "detail_failed"
    if is_race(detail):
        logger.info("Skipping race %s", activity_id)
        return "race"
    if not is_default_name(detail.get("name"), settings.default_run_names):
        return "not_default_name"

    laps = fetch_laps_with_retry(
        ctx.client.get_activity_laps,
        activity_id,
        interval_seconds=settings.lap_retry_interval_seconds,
        max_minutes=settings.lap_retry_max_minutes,
        can_continue=ctx.budget.try_consume_read,
        sleep=sleep,
        reads_left=lambda: not ctx.budget.exhausted,
    )
    if not laps:
        logger.info("Laps not ready for %s; skipping for now.", activity_id)
        return "laps_not_ready"

    update = build_update(detail, laps, ctx.pace_range, settings)
    if not ctx.rename(activity_id, update):
        return "update_failed"
    logger.info("Updated %s -> %s", activity_id, update["name"])
    return "updated"


def run_once(
    settings: Settings | None = None,
    client: Any | None = None,
    *,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> dict[str, Any]:
    settings = settings or Settings.from_env()
    settings.validate()
    settings.ensure_state_paths()
    _configure_logging(settings.log_level)

    pace_range = settings.pace_range()
    local_tz = resolve_timezone(settings.timezone)
    now_local = (now or datetime.now(timezone.utc)).astimezone(local_tz)
    if not is_within_active_hours(now_local, settings.active_hours_start, settings.active_hours_end):
        logger.info("Outside active hours; exiting without API calls.")
        return {"status": "outside_active_hours"}

    ctx = RunContext(
        settings=settings,
        client=client or StravaClient(settings),
        budget=ReadBudget(settings.max_reads_per_run),
        pace_range=pace_range,
        now_local=now_local,
        dry_run=dry_run,
    )

    logger.info("Starting update cycle.")
    midnight = now_local.replace(hour=0, minute=0, second=0, microsecond=0)
    activities: list[dict[str, Any]] = []
    listing_ok = ctx.budget.try_consume_read()
    if listing_ok:
        try:
            activities = ctx.client.list_activities(midnight, per_page=TODAY_PAGE_SIZE)
        except requests.RequestException as exc:
            logger.error("Failed to list activities: %s", exc)
            listing_ok = False

    outcomes: dict[str, int] = {}
    budget_stopped = False
    for summary in activities:
        if ctx.budget.exhausted:
            logger.warning("Read cap reached; stopping further processing.")
            budget_stopped = True
            break
        outcome = _process_activity(ctx, summary, sleep=sleep)
        outcomes[outcome] = outcomes.get(outcome, 0) + 1
        if outcome == "budget_exhausted":
            logger.warning("Read cap reached; stopping further processing.")
            budget_stopped = True
            break

    if settings.enable_week_totals:
        week_total = finalize_previous_week(ctx)
    else:
        week_total = {"status": "disabled"}

    result = {
        "status": "completed",
        "listing_ok": listing_ok,
        "activities_seen": len(activities),
        "outcomes": outcomes,
        "budget_stopped": budget_stopped,
        "updated": list(ctx.updated),
        "week_total": week_total,
        **ctx.budget.snapshot(),
    }
    write_json(
        settings.last_run_json_file,
        {"finished_at_utc": datetime.now(timezone.utc).isoformat(), "dry_run": dry_run, **result},
    )
    logger.info(
        "Update cycle finished: %s reads used, %s left, %s update(s).",
        ctx.budget.reads_used,
        ctx.budget.remaining,
        len(ctx.updated),
    )
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Rename today's default-named Strava runs from their laps.")
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Log the names and descriptions that would be written without updating Strava.",
    )
    args = parser.parse_args()
    result = run_once(dry_run=args.dry_run)
    logger.info("Run result: %s", result)


if __name__ == "__main__":
    main()
