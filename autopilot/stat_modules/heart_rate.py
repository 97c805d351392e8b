from __future__ import annotations

from typing import Any

from ..numeric_utils import as_float, round_half_up


def format_avg_hr_description(avg_hr: Any, max_hr: float | None = None) -> str:
    average = as_float(avg_hr)
    if average is None:
        return ""
    rounded = round_half_up(average)
    if not max_hr or max_hr <= 0:
        return f"Avg HR: {rounded} bpm"
    pct = round_half_up(rounded / max_hr * 100)
    return f"Avg HR: {rounded} bpm ({pct}% max)"
