"""Resúmenes históricos: semana con racha y calendario mensual."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, tzinfo

import pandas as pd

from hydro_tool.model import DayStat, Entry, MonthCell, WeeklyStats
from hydro_tool.timewindow import (
    add_days,
    at_midnight,
    day_range_ms,
    end_of_day,
    from_ms,
    month_bounds,
    to_ms,
)

WEEKDAY_HEADERS: tuple[str, ...] = ("L", "M", "X", "J", "V", "S", "D")
WEEKDAY_SHORT: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_MONTH_NAMES: tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)

_FRAME_COLUMNS = ["id", "datetime", "date", "amount_ml", "type", "note"]


def entries_to_frame(entries: Sequence[Entry], tz: tzinfo | None = None) -> pd.DataFrame:
    """Convert entries to a DataFrame with local datetime and date columns."""
    rows = [
        {
            "id": e.id,
            "datetime": from_ms(e.timestamp_ms, tz),
            "date": from_ms(e.timestamp_ms, tz).date(),
            "amount_ml": e.amount_ml,
            "type": e.type.value,
            "note": e.note,
        }
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=_FRAME_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("datetime").reset_index(drop=True)


def daily_totals(entries: Sequence[Entry], tz: tzinfo | None = None) -> pd.DataFrame:
    """Sum intake per local calendar day (only days with entries)."""
    events = entries_to_frame(entries, tz)
    if events.empty:
        return pd.DataFrame(columns=["date", "total_ml"])
    g = events.groupby("date", as_index=False).agg(total_ml=("amount_ml", "sum"))
    g["total_ml"] = g["total_ml"].astype(int)
    return g.sort_values("date").reset_index(drop=True)


def _sum_between(entries: Sequence[Entry], start_ms: int, end_ms: int) -> int:
    return sum(e.amount_ml for e in entries if start_ms <= e.timestamp_ms <= end_ms)


def weekly_stats(entries: Sequence[Entry], now: datetime, goal_ml: int) -> WeeklyStats:
    """Totals for the seven days ending today and the current goal streak.

    Args:
        entries: Snapshot covering (at least) the last seven days.
        now: Reference instant; its day is the last one.
        goal_ml: Daily goal.

    Returns:
        Seven day stats, oldest first, and the streak.
    """
    days: list[DayStat] = []
    for offset in range(6, -1, -1):
        day = add_days(now, -offset)
        start_ms, end_ms = day_range_ms(day)
        days.append(
            DayStat(day=day.date(), total_ml=_sum_between(entries, start_ms, end_ms))
        )
    return WeeklyStats(days=tuple(days), streak=compute_streak(days, goal_ml))


def compute_streak(days: Sequence[DayStat], goal_ml: int) -> int:
    """Consecutive days meeting the goal, counted backwards from the last day.

    A last day ("today") still under the goal does not break the streak: the
    count then starts from the day before it.
    """
    if not days:
        return 0
    idx = len(days) - 1
    if days[idx].total_ml < goal_ml:
        idx -= 1
    streak = 0
    while idx >= 0 and days[idx].total_ml >= goal_ml:
        streak += 1
        idx -= 1
    return streak


def monthly_totals(
    entries: Sequence[Entry], year: int, month: int, tz: tzinfo | None = None
) -> dict[date, int]:
    """Intake per day for the entries that fall inside the month."""
    first, last = month_bounds(year, month)
    start_ms = to_ms(at_midnight(first, tz))
    end_ms = to_ms(end_of_day(at_midnight(last, tz)))
    inside = [e for e in entries if start_ms <= e.timestamp_ms <= end_ms]
    totals = daily_totals(inside, tz)
    return {
        row.date: int(row.total_ml) for row in totals.itertuples(index=False)
    }


def monthly_grid(
    entries: Sequence[Entry],
    year: int,
    month: int,
    goal_ml: int,
    tz: tzinfo | None = None,
) -> list[list[MonthCell | None]]:
    """Month laid out as Monday-first week rows for a heatmap.

    Days before the 1st and after the last day are ``None`` placeholders, so
    every row has exactly seven cells.

    Args:
        entries: Snapshot covering the month.
        year: Calendar year.
        month: Month number (1-12).
        goal_ml: Daily goal used for ``met_goal``.
        tz: Timezone that defines the local calendar days.

    Returns:
        List of week rows.
    """
    first, last = month_bounds(year, month)
    totals = monthly_totals(entries, year, month, tz)

    # date.weekday() is already Monday=0 .. Sunday=6
    cells: list[MonthCell | None] = [None] * first.weekday()
    for day_number in range(1, last.day + 1):
        day = first.replace(day=day_number)
        total = totals.get(day, 0)
        cells.append(MonthCell(day=day, total_ml=total, met_goal=total >= goal_ml))
    while len(cells) % 7 != 0:
        cells.append(None)

    return [cells[i : i + 7] for i in range(0, len(cells), 7)]


def month_title(year: int, month: int) -> str:
    """``"octubre de 2026"``."""
    return f"{_MONTH_NAMES[month - 1]} de {year}"


def build_calendar(min_day: date, max_day: date) -> pd.DataFrame:
    """Build inclusive day calendar DataFrame."""
    days = pd.date_range(start=min_day, end=max_day, freq="D")
    return pd.DataFrame({"date": days.date})


def daily_history(
    entries: Sequence[Entry],
    min_day: date,
    max_day: date,
    goal_ml: int,
    tz: tzinfo | None = None,
) -> pd.DataFrame:
    """One row per calendar day in ``[min_day, max_day]``, empty days as 0.

    Columns: date, total_ml, goal_ml, met_goal.
    """
    cal = build_calendar(min_day=min_day, max_day=max_day)
    totals = daily_totals(entries, tz)
    out = cal.merge(totals, on="date", how="left")
    out["total_ml"] = (
        pd.to_numeric(out["total_ml"], errors="coerce").fillna(0).astype(int)
    )
    out["goal_ml"] = goal_ml
    out["met_goal"] = out["total_ml"] >= goal_ml
    return out.sort_values("date").reset_index(drop=True)
