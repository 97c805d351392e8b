from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv

from .numeric_utils import UNIT_SYSTEMS, PaceRange


load_dotenv()


EnvGetter = Callable[[str], str | None]

DEFAULT_RUN_NAMES = (
    "Morning Run",
    "Lunch Run",
    "Afternoon Run",
    "Evening Run",
    "Night Run",
)
WEEK_STARTS = ("monday", "sunday")


def _bool_env(name: str, default: bool, *, getenv: EnvGetter = os.getenv) -> bool:
    value = getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _str_env(*names: str, default: str = "", getenv: EnvGetter = os.getenv) -> str:
    for name in names:
        value = getenv(name)
        if value is not None:
            return value.strip()
    return default


def _optional_str_env(*names: str, getenv: EnvGetter = os.getenv) -> str | None:
    value = _str_env(*names, default="", getenv=getenv)
    return value or None


def _int_env(
    name: str,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
    *,
    getenv: EnvGetter = os.getenv,
) -> int:
    value = getenv(name)
    if value is None:
        parsed = default
    else:
        try:
            parsed = int(value.strip())
        except ValueError:
            parsed = default

    if minimum is not None and parsed < minimum:
        parsed = minimum
    if maximum is not None and parsed > maximum:
        parsed = maximum
    return parsed


def _optional_float_env(name: str, *, getenv: EnvGetter = os.getenv) -> float | None:
    value = getenv(name)
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _list_env(name: str, default: tuple[str, ...], *, getenv: EnvGetter = os.getenv) -> tuple[str, ...]:
    value = getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    strava_client_id: str
    strava_client_secret: str
    strava_refresh_token: str
    strava_access_token: str | None

    log_level: str
    timezone: str
    poll_interval_seconds: int

    state_dir: Path
    strava_token_file: Path
    last_run_json_file: Path

    active_hours_start: str
    active_hours_end: str
    pace_fastest: str
    pace_slowest: str
    unit_system: str
    default_run_names: tuple[str, ...]
    max_hr: float | None

    lap_retry_interval_seconds: int
    lap_retry_max_minutes: int
    max_reads_per_run: int

    week_start: str
    enable_week_totals: bool

    @classmethod
    def from_env(cls, getenv: EnvGetter = os.getenv) -> "Settings":
        state_dir = Path(getenv("STATE_DIR") or "state").resolve()
        strava_token_file = state_dir / (getenv("STRAVA_TOKEN_FILE") or "strava_tokens.json")
        last_run_json_file = state_dir / (getenv("LAST_RUN_JSON_FILE") or "last_run.json")

        poll_interval_raw = getenv("POLL_INTERVAL_SECONDS") or "300"
        try:
            poll_interval_seconds = max(60, int(poll_interval_raw))
        except ValueError:
            poll_interval_seconds = 300

        return cls(
            strava_client_id=_str_env("STRAVA_CLIENT_ID", "CLIENT_ID", getenv=getenv),
            strava_client_secret=_str_env("STRAVA_CLIENT_SECRET", "CLIENT_SECRET", getenv=getenv),
            strava_refresh_token=_str_env("STRAVA_REFRESH_TOKEN", "REFRESH_TOKEN", getenv=getenv),
            strava_access_token=_optional_str_env("STRAVA_ACCESS_TOKEN", "ACCESS_TOKEN", getenv=getenv),
            log_level=_str_env("LOG_LEVEL", default="INFO", getenv=getenv).upper(),
            timezone=_str_env("TIMEZONE", "TZ", default="UTC", getenv=getenv),
            poll_interval_seconds=poll_interval_seconds,
            state_dir=state_dir,
            strava_token_file=strava_token_file,
            last_run_json_file=last_run_json_file,
            active_hours_start=_str_env("ACTIVE_HOURS_START", default="05:00", getenv=getenv),
            active_hours_end=_str_env("ACTIVE_HOURS_END", default="23:00", getenv=getenv),
            pace_fastest=_str_env("PACE_FASTEST", default="5:30", getenv=getenv),
            pace_slowest=_str_env("PACE_SLOWEST", default="7:30", getenv=getenv),
            unit_system=_str_env("UNIT_SYSTEM", default="mi", getenv=getenv).lower(),
            default_run_names=_list_env("DEFAULT_RUN_NAMES", DEFAULT_RUN_NAMES, getenv=getenv),
            max_hr=_optional_float_env("MAX_HR", getenv=getenv),
            lap_retry_interval_seconds=_int_env("LAP_RETRY_INTERVAL_SECONDS", 60, minimum=1, maximum=3600, getenv=getenv),
            lap_retry_max_minutes=_int_env("LAP_RETRY_MAX_MINUTES", 30, minimum=0, maximum=240, getenv=getenv),
            max_reads_per_run=_int_env("MAX_READS_PER_RUN", 90, minimum=1, maximum=1000, getenv=getenv),
            week_start=_str_env("WEEK_START", default="monday", getenv=getenv).lower(),
            enable_week_totals=_bool_env("ENABLE_WEEK_TOTALS", True, getenv=getenv),
        )

    def pace_range(self) -> PaceRange:
        return PaceRange.from_strings(self.pace_fastest, self.pace_slowest)

    def validate(self) -> None:
        missing = []
        if not self.strava_client_id:
            missing.append("STRAVA_CLIENT_ID (or CLIENT_ID)")
        if not self.strava_client_secret:
            missing.append("STRAVA_CLIENT_SECRET (or CLIENT_SECRET)")
        if not self.strava_refresh_token:
            missing.append("STRAVA_REFRESH_TOKEN (or REFRESH_TOKEN)")
        if missing:
            missing_str = ", ".join(missing)
            raise ValueError(f"Missing required environment variables: {missing_str}")
        if self.unit_system not in UNIT_SYSTEMS:
            raise ValueError(f"UNIT_SYSTEM must be one of {', '.join(UNIT_SYSTEMS)}, got {self.unit_system!r}")
        if self.week_start not in WEEK_STARTS:
            raise ValueError(f"WEEK_START must be one of {', '.join(WEEK_STARTS)}, got {self.week_start!r}")
        self.pace_range()

    def ensure_state_paths(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
