"""Consejo "bebe X antes de HH:MM" para volver al ritmo."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from hydro_tool.model import Guidance, PacingResult
from hydro_tool.pacing import PACE_THRESHOLD_ML, active_window, expected_at


def _checkpoint_in_window(
    now: datetime, start: datetime, end: datetime, step_minutes: int
) -> datetime:
    if now < start:
        return start
    if now >= end:
        return end
    # Jump straight to the step that contains ``now``, then move past it.
    step = timedelta(minutes=step_minutes)
    steps_done = (now - start) // step
    at = start + step * steps_done
    while at <= now:
        at += step
    return min(at, end)


def next_checkpoint(
    now: datetime, wake_hour: int, sleep_hour: int, step_minutes: int
) -> datetime:
    """First step boundary strictly after ``now``, clamped to the window end.

    Boundaries are counted from the window start in ``step_minutes``
    increments. Before the window opens the next checkpoint is its start;
    once the last step overshoots, the checkpoint is the window end itself.
    """
    start, end = active_window(now, wake_hour, sleep_hour)
    return _checkpoint_in_window(now, start, end, step_minutes)


def next_checkpoint_guidance(
    now: datetime,
    wake_hour: int,
    sleep_hour: int,
    daily_goal_ml: int,
    total_today_ml: int,
    step_minutes: int,
) -> Guidance:
    """How much is missing to be on pace at the next checkpoint.

    Args:
        now: Reference instant.
        wake_hour: Hour the window opens.
        sleep_hour: Hour the window closes.
        daily_goal_ml: Daily goal.
        total_today_ml: Intake recorded so far today.
        step_minutes: Checkpoint spacing.

    Returns:
        Checkpoint instant and the (non-negative) ml needed by then.
    """
    start, end = active_window(now, wake_hour, sleep_hour)
    at = _checkpoint_in_window(now, start, end, step_minutes)
    expected = expected_at(at, start, end, daily_goal_ml)
    return Guidance(at=at, need_ml=max(0, expected - total_today_ml))


def round_up_to_quick(need_ml: int, quick_amounts_ml: Iterable[int]) -> int:
    """Round a need up to one of the quick-add buttons.

    Picks the smallest quick amount that covers ``need_ml``; falls back to the
    largest one when none does. A need of zero or less returns 0.

    Raises:
        ValueError: If ``quick_amounts_ml`` is empty.
    """
    ordered = sorted(quick_amounts_ml)
    if not ordered:
        raise ValueError("quick_amounts_ml must not be empty")
    if need_ml <= 0:
        return 0
    for amount in ordered:
        if amount >= need_ml:
            return amount
    return ordered[-1]


def should_show_guidance(pacing: PacingResult, guidance: Guidance) -> bool:
    """Only nudge when clearly behind and something is still missing."""
    return pacing.diff_ml < -PACE_THRESHOLD_ML and guidance.need_ml > 0
