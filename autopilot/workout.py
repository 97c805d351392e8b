from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .laps import Lap, Segment, is_qualifying, merge_laps_by_pace
from .numeric_utils import PaceRange, format_duration, format_pace, round_half_up, snap_to_minute


logger = logging.getLogger(__name__)


@dataclass
class Rep:
    segment: Segment
    rest_seconds: float = 0.0


@dataclass(frozen=True)
class WorkoutDescription:
    title: str
    body: str

    def as_update_payload(self) -> dict[str, str]:
        return {"name": self.title, "description": self.body}


def median_seconds(values: Sequence[float]) -> float:
    """Median of rep durations; even counts use the half-up rounded mean of the middle pair."""
    if not values:
        raise ValueError("median_seconds() requires at least one value")
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[middle]
    return round_half_up((ordered[middle - 1] + ordered[middle]) / 2)


def _interval_window(qualifying: list[bool]) -> tuple[int, int] | None:
    if not any(qualifying):
        return None
    first = qualifying.index(True)
    last = len(qualifying) - 1 - qualifying[::-1].index(True)
    return first, last


def collect_reps(
    segments: Sequence[Segment],
    pace_range: PaceRange,
    unit: str,
) -> tuple[list[Rep], float] | None:
    """Split segments into reps inside the first..last work window.

    Returns the reps and the cooldown seconds after the last work segment,
    or None when nothing in the activity ran at work pace.
    """
    qualifying = [is_qualifying(segment, pace_range, unit) for segment in segments]
    window = _interval_window(qualifying)
    if window is None:
        return None
    first, last = window

    reps: list[Rep] = []
    for position in range(first, last + 1):
        segment = segments[position]
        if qualifying[position]:
            reps.append(Rep(segment=segment))
        elif reps:
            reps[-1].rest_seconds += segment.moving_time_seconds
    if not reps:
        return None

    cooldown_seconds = sum(segment.moving_time_seconds for segment in segments[last + 1:])
    return reps, cooldown_seconds


def describe_workout(
    segments: Sequence[Segment],
    pace_range: PaceRange,
    unit: str,
) -> WorkoutDescription | None:
    collected = collect_reps(segments, pace_range, unit)
    if collected is None:
        return None
    reps, cooldown_seconds = collected

    rep_seconds = [snap_to_minute(rep.segment.moving_time_seconds) for rep in reps]
    total_meters = sum(rep.segment.distance_meters for rep in reps)
    average_pace = format_pace(total_meters, sum(rep_seconds), unit)
    typical_seconds = median_seconds(rep_seconds)
    title = f"{format_duration(typical_seconds)} x {len(reps)} (avg {average_pace})"

    lines: list[str] = []
    last_position = len(reps) - 1
    for position, (rep, seconds) in enumerate(zip(reps, rep_seconds)):
        line = f"{position + 1}) {format_duration(seconds)} @ {format_pace(rep.segment.distance_meters, seconds, unit)}"
        if rep.rest_seconds > 0 and position < last_position:
            line += f" + rest {format_duration(snap_to_minute(rep.rest_seconds))}"
        elif position == last_position and cooldown_seconds > 0:
            line += " + CD"
        lines.append(line)

    logger.debug("Detected %s reps (cooldown %ss).", len(reps), cooldown_seconds)
    return WorkoutDescription(title=title, body="\n".join(lines))


def build_workout_description(
    laps: Iterable[Lap],
    pace_range: PaceRange,
    unit: str,
) -> WorkoutDescription | None:
    laps = list(laps)
    if not laps:
        return None
    return describe_workout(merge_laps_by_pace(laps, pace_range, unit), pace_range, unit)
