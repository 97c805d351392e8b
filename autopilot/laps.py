from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from .numeric_utils import PaceRange, as_float, pace_for


@dataclass(frozen=True)
class Lap:
    index: int
    distance_meters: float
    moving_time_seconds: float
    elapsed_time_seconds: float = 0.0

    @property
    def start_index(self) -> int:
        return self.index

    @property
    def end_index(self) -> int:
        return self.index

    @classmethod
    def from_strava(cls, payload: dict[str, Any], position: int = 1) -> "Lap":
        raw_index = payload.get("lap_index")
        index = int(raw_index) if isinstance(raw_index, int) and not isinstance(raw_index, bool) else position
        return cls(
            index=index,
            distance_meters=max(0.0, as_float(payload.get("distance")) or 0.0),
            moving_time_seconds=max(0.0, as_float(payload.get("moving_time")) or 0.0),
            elapsed_time_seconds=max(0.0, as_float(payload.get("elapsed_time")) or 0.0),
        )


@dataclass(frozen=True)
class MergedSegment:
    start_index: int
    end_index: int
    distance_meters: float
    moving_time_seconds: float
    merged: bool = True


Segment = Union[Lap, MergedSegment]


def laps_from_strava(payload: Iterable[Any]) -> list[Lap]:
    laps: list[Lap] = []
    for position, item in enumerate(payload, start=1):
        if isinstance(item, dict):
            laps.append(Lap.from_strava(item, position=position))
    return laps


def segment_pace(segment: Segment, unit: str) -> float | None:
    return pace_for(segment.distance_meters, segment.moving_time_seconds, unit)


def is_qualifying(segment: Segment, pace_range: PaceRange, unit: str) -> bool:
    return pace_range.contains(segment_pace(segment, unit))


def _collapse(group: list[Segment]) -> Segment:
    if len(group) == 1:
        return group[0]
    return MergedSegment(
        start_index=group[0].start_index,
        end_index=group[-1].end_index,
        distance_meters=sum(item.distance_meters for item in group),
        moving_time_seconds=sum(item.moving_time_seconds for item in group),
    )


def merge_laps_by_pace(
    laps: Iterable[Segment],
    pace_range: PaceRange,
    unit: str,
) -> list[Segment]:
    """Collapse each run of adjacent work-pace laps into a single segment.

    Non-qualifying laps pass through untouched and the original order is kept,
    so the output alternates between work segments and everything in between.
    """
    merged: list[Segment] = []
    group: list[Segment] = []

    for lap in laps:
        if is_qualifying(lap, pace_range, unit):
            group.append(lap)
            continue
        if group:
            merged.append(_collapse(group))
            group = []
        merged.append(lap)

    if group:
        merged.append(_collapse(group))
    return merged
