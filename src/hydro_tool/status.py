"""Estado de hoy: total, ritmo y consejo, calculados de una sola vez."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from hydro_tool.guidance import (
    next_checkpoint_guidance,
    round_up_to_quick,
    should_show_guidance,
)
from hydro_tool.model import Entry, Guidance, PacingResult, Settings
from hydro_tool.pacing import classify, expected_by_now, progress_percent
from hydro_tool.timewindow import day_range_ms


@dataclass(frozen=True)
class TodayStatus:
    """Snapshot of today's progress at one instant."""

    total_ml: int
    goal_ml: int
    percent: int
    pacing: PacingResult
    guidance: Guidance
    recommended_ml: int
    show_guidance: bool


def today_total(entries: Sequence[Entry], now: datetime) -> int:
    """Sum of the entries inside ``now``'s calendar day."""
    start_ms, end_ms = day_range_ms(now)
    return sum(e.amount_ml for e in entries if start_ms <= e.timestamp_ms <= end_ms)


def today_status(
    entries: Sequence[Entry], settings: Settings, now: datetime
) -> TodayStatus:
    """Compute today's status from a snapshot of entries.

    Entries outside today are ignored, so callers may pass a wider range.
    """
    total = today_total(entries, now)
    expected = expected_by_now(
        now, settings.wake_hour, settings.sleep_hour, settings.daily_goal_ml
    )
    pacing = classify(total, expected)
    guidance = next_checkpoint_guidance(
        now,
        settings.wake_hour,
        settings.sleep_hour,
        settings.daily_goal_ml,
        total,
        settings.step_minutes,
    )
    return TodayStatus(
        total_ml=total,
        goal_ml=settings.daily_goal_ml,
        percent=progress_percent(total, settings.daily_goal_ml),
        pacing=pacing,
        guidance=guidance,
        recommended_ml=round_up_to_quick(guidance.need_ml, settings.quick_amounts_ml),
        show_guidance=should_show_guidance(pacing, guidance),
    )
