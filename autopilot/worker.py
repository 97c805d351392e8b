from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from .active_window import resolve_timezone, seconds_until_active_start
from .activity_pipeline import run_once
from .config import Settings


logger = logging.getLogger(__name__)


def _should_log_updates(result: object) -> bool:
    if not isinstance(result, dict):
        return False
    return bool(result.get("updated"))


def main() -> None:
    settings = Settings.from_env()
    settings.validate()
    settings.ensure_state_paths()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    interval = settings.poll_interval_seconds
    local_tz = resolve_timezone(settings.timezone)
    logger.info("Worker started with poll interval: %ss", interval)
    logger.info(
        "Active hours: %s-%s (%s)",
        settings.active_hours_start,
        settings.active_hours_end,
        local_tz,
    )

    while True:
        now_local = datetime.now(local_tz)
        sleep_seconds = seconds_until_active_start(
            now_local,
            settings.active_hours_start,
            settings.active_hours_end,
        )
        if sleep_seconds > 0:
            logger.info(
                "Outside active hours at %s, sleeping for %ss",
                now_local.isoformat(timespec="seconds"),
                sleep_seconds,
            )
            time.sleep(sleep_seconds)
            continue

        try:
            result = run_once(settings, now=datetime.now(timezone.utc))
            if _should_log_updates(result):
                for update in result["updated"]:
                    logger.info("Renamed %s to %s", update.get("activity_id"), update.get("name"))
            logger.info("Cycle result: %s", result)
        except Exception:
            logger.exception("Worker cycle failed.")
        time.sleep(interval)


if __name__ == "__main__":
    main()
