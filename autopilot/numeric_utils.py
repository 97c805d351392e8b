from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

METERS_PER_MILE = 1609.344
METERS_PER_KILOMETER = 1000.0
UNIT_SYSTEMS = ("mi", "km")


def as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def meters_to_units(meters: float, unit: str) -> float:
    if unit == "mi":
        return meters / METERS_PER_MILE
    return meters / METERS_PER_KILOMETER


def pace_for(distance_meters: float, seconds: float, unit: str) -> float | None:
    """Minutes per mile/kilometer, or None when there is no distance to divide by."""
    if distance_meters <= 0:
        return None
    return (seconds / 60.0) / meters_to_units(distance_meters, unit)


def format_pace(distance_meters: float, seconds: float, unit: str) -> str:
    pace = pace_for(distance_meters, seconds, unit)
    if pace is None or not math.isfinite(pace):
        return "-"
    total_seconds = round_half_up(pace * 60)
    minutes = total_seconds // 60
    secs = total_seconds % 60
    label = "min/mi" if unit == "mi" else "min/km"
    return f"{minutes}:{secs:02d} {label}"


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def snap_to_minute(seconds: float, tolerance_seconds: float = 2) -> float:
    """Round to the whole minute when within tolerance of it (301s reads as 5:00)."""
    nearest_minute = round_half_up(seconds / 60.0) * 60
    if abs(seconds - nearest_minute) <= tolerance_seconds:
        return nearest_minute
    return seconds


def parse_pace(value: Any) -> float | None:
    """Parse "M:SS" or a decimal number of minutes into minutes per unit."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if value > 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if ":" in text:
        minutes_text, _, seconds_text = text.partition(":")
        minutes = as_float(minutes_text)
        seconds = as_float(seconds_text)
        if minutes is None or seconds is None:
            return None
        if minutes < 0 or seconds < 0 or seconds >= 60:
            return None
        pace = minutes + seconds / 60.0
        return pace if pace > 0 else None
    parsed = as_float(text)
    if parsed is None or not math.isfinite(parsed) or parsed <= 0:
        return None
    return parsed


@dataclass(frozen=True)
class PaceRange:
    fastest_min_per_unit: float
    slowest_min_per_unit: float

    def __post_init__(self) -> None:
        if self.fastest_min_per_unit <= 0 or self.slowest_min_per_unit <= 0:
            raise ValueError("Pace range bounds must be positive.")
        if self.fastest_min_per_unit > self.slowest_min_per_unit:
            raise ValueError("Fastest pace must not be slower than slowest pace.")

    @classmethod
    def from_strings(cls, fastest: Any, slowest: Any) -> "PaceRange":
        first = parse_pace(fastest)
        second = parse_pace(slowest)
        if first is None or second is None:
            raise ValueError(f"Invalid pace range: fastest={fastest!r}, slowest={slowest!r}")
        return cls(min(first, second), max(first, second))

    def contains(self, pace: float | None) -> bool:
        if pace is None:
            return False
        return self.fastest_min_per_unit <= pace <= self.slowest_min_per_unit
