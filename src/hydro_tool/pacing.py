"""Curva de consumo esperado y clasificación del ritmo."""

from __future__ import annotations

import math
from datetime import datetime

from hydro_tool.model import PacingLabel, PacingResult
from hydro_tool.timewindow import add_days, elapsed_ms

PACE_THRESHOLD_ML = 150


def round_ml(value: float) -> int:
    """Round half up to whole millilitres (inputs are non-negative)."""
    return int(math.floor(value + 0.5))


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def active_window(
    now: datetime, wake_hour: int, sleep_hour: int
) -> tuple[datetime, datetime]:
    """Return the ``(start, end)`` of the active window that governs ``now``.

    The window opens at ``wake_hour`` and closes at ``sleep_hour`` on ``now``'s
    day. When ``sleep_hour`` is at or before ``wake_hour`` the window crosses
    midnight (22 -> 7 is nine hours). The window always opens on ``now``'s
    calendar day, so at 02:00 an overnight window has not opened yet.
    """
    start = now.replace(hour=wake_hour, minute=0, second=0, microsecond=0)
    end = now.replace(hour=sleep_hour, minute=0, second=0, microsecond=0)
    if end <= start:
        end = add_days(end, 1)
    return start, end


def expected_at(
    at: datetime, start: datetime, end: datetime, daily_goal_ml: int
) -> int:
    """Expected intake at ``at`` for an explicit active window."""
    total_ms = elapsed_ms(start, end)
    if total_ms <= 0:
        return 0
    ratio = _clamp(elapsed_ms(start, at) / total_ms, 0.0, 1.0)
    return round_ml(daily_goal_ml * ratio)


def expected_by_now(
    now: datetime, wake_hour: int, sleep_hour: int, daily_goal_ml: int
) -> int:
    """How many ml should have been drunk by ``now``.

    The goal is spread linearly over the active window: 0 before it opens,
    the full goal once it closes.

    Args:
        now: Reference instant; day boundaries use its tzinfo.
        wake_hour: Hour the window opens (0-23).
        sleep_hour: Hour the window closes (0-23).
        daily_goal_ml: Daily goal.

    Returns:
        Expected intake in whole ml.
    """
    start, end = active_window(now, wake_hour, sleep_hour)
    return expected_at(now, start, end, daily_goal_ml)


def classify(actual_ml: int, expected_ml: int) -> PacingResult:
    """Label ``actual_ml`` against ``expected_ml``.

    A difference strictly under the threshold is on pace; exactly 150 ml
    either way is already off pace.
    """
    diff = actual_ml - expected_ml
    if abs(diff) < PACE_THRESHOLD_ML:
        label = PacingLabel.ON_PACE
    elif diff < 0:
        label = PacingLabel.BEHIND
    else:
        label = PacingLabel.AHEAD
    return PacingResult(expected_ml=expected_ml, diff_ml=diff, label=label)


def progress_percent(total_ml: int, goal_ml: int) -> int:
    """Share of the goal already drunk, capped at 100."""
    if goal_ml <= 0:
        return 100
    return min(100, round_ml(total_ml / goal_ml * 100))


def diff_text(diff_ml: int) -> str:
    """``"+120 ml"`` / ``"-300 ml"`` / ``"0 ml"``."""
    if diff_ml == 0:
        return "0 ml"
    sign = "+" if diff_ml > 0 else ""
    return f"{sign}{diff_ml} ml"
