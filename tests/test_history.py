from __future__ import annotations

from datetime import date, datetime, tzinfo

from hydro_tool.history import (
    WEEKDAY_HEADERS,
    compute_streak,
    daily_history,
    daily_totals,
    month_title,
    monthly_grid,
    weekly_stats,
)
from hydro_tool.model import DayStat, DrinkType, Entry
from hydro_tool.timewindow import to_ms

GOAL = 2000


def _day(local_tz: tzinfo, day: int, hour: int = 12, month: int = 10) -> datetime:
    return datetime(2025, month, day, hour, 0, tzinfo=local_tz)


def _entry(when: datetime, amount_ml: int) -> Entry:
    return Entry(timestamp_ms=to_ms(when), amount_ml=amount_ml, type=DrinkType.WATER)


def test_weekly_stats_empty_entries(local_tz: tzinfo) -> None:
    stats = weekly_stats([], _day(local_tz, 15), GOAL)
    assert len(stats.days) == 7
    assert all(d.total_ml == 0 for d in stats.days)
    assert stats.streak == 0


def test_weekly_stats_days_oldest_first(local_tz: tzinfo) -> None:
    entries = [
        _entry(_day(local_tz, 9, 8), 300),
        _entry(_day(local_tz, 9, 20), 200),
        _entry(_day(local_tz, 15, 9), 700),
        _entry(_day(local_tz, 8, 12), 999),
    ]
    stats = weekly_stats(entries, _day(local_tz, 15), GOAL)
    assert [d.day for d in stats.days] == [date(2025, 10, d) for d in range(9, 16)]
    assert stats.days[0].total_ml == 500
    assert stats.days[-1].total_ml == 700
    assert sum(d.total_ml for d in stats.days) == 1200


def test_weekly_stats_day_boundaries_are_inclusive(local_tz: tzinfo) -> None:
    entries = [
        _entry(datetime(2025, 10, 14, 0, 0, tzinfo=local_tz), 100),
        _entry(datetime(2025, 10, 14, 23, 59, 59, 999000, tzinfo=local_tz), 200),
        _entry(datetime(2025, 10, 15, 0, 0, tzinfo=local_tz), 400),
    ]
    stats = weekly_stats(entries, _day(local_tz, 15), GOAL)
    assert stats.days[-2].total_ml == 300
    assert stats.days[-1].total_ml == 400


def test_streak_all_seven_days(local_tz: tzinfo) -> None:
    entries = [_entry(_day(local_tz, d), GOAL) for d in range(9, 16)]
    assert weekly_stats(entries, _day(local_tz, 15), GOAL).streak == 7


def test_streak_today_pending_counts_from_yesterday(local_tz: tzinfo) -> None:
    entries = [_entry(_day(local_tz, d), GOAL) for d in (12, 13, 14)]
    entries.append(_entry(_day(local_tz, 11), 1999))
    entries.append(_entry(_day(local_tz, 15), 500))
    assert weekly_stats(entries, _day(local_tz, 15), GOAL).streak == 3


def test_streak_today_met_includes_today(local_tz: tzinfo) -> None:
    entries = [_entry(_day(local_tz, d), GOAL) for d in (14, 15)]
    assert weekly_stats(entries, _day(local_tz, 15), GOAL).streak == 2


def test_streak_broken_yesterday_is_zero(local_tz: tzinfo) -> None:
    entries = [_entry(_day(local_tz, d), GOAL) for d in (10, 11, 12, 13)]
    assert weekly_stats(entries, _day(local_tz, 15), GOAL).streak == 0


def test_compute_streak_edge_cases() -> None:
    assert compute_streak([], GOAL) == 0
    assert compute_streak([DayStat(day=date(2025, 10, 15), total_ml=500)], GOAL) == 0
    assert compute_streak([DayStat(day=date(2025, 10, 15), total_ml=GOAL)], GOAL) == 1


def test_weekly_stats_is_idempotent(local_tz: tzinfo) -> None:
    entries = [_entry(_day(local_tz, d), 250 * d) for d in range(9, 16)]
    now = _day(local_tz, 15)
    assert weekly_stats(entries, now, GOAL) == weekly_stats(entries, now, GOAL)


def test_monthly_grid_month_starting_on_wednesday(local_tz: tzinfo) -> None:
    # 2025-10-01 is a Wednesday
    weeks = monthly_grid([], 2025, 10, GOAL, local_tz)
    assert weeks[0][0] is None
    assert weeks[0][1] is None
    first = weeks[0][2]
    assert first is not None
    assert first.day == date(2025, 10, 1)
    assert all(len(week) == 7 for week in weeks)
    assert sum(len(week) for week in weeks) % 7 == 0
    assert len(weeks) == 5
    # 2025-10-31 is a Friday: Saturday and Sunday are placeholders
    assert weeks[-1][5] is None
    assert weeks[-1][6] is None
    assert all(
        cell.total_ml == 0 and not cell.met_goal
        for week in weeks
        for cell in week
        if cell is not None
    )


def test_monthly_grid_month_starting_on_monday_has_no_padding(
    local_tz: tzinfo,
) -> None:
    weeks = monthly_grid([], 2021, 2, GOAL, local_tz)
    assert len(weeks) == 4
    assert all(cell is not None for week in weeks for cell in week)


def test_monthly_grid_totals_and_goal(local_tz: tzinfo) -> None:
    entries = [
        _entry(_day(local_tz, 1, 9), 1500),
        _entry(_day(local_tz, 1, 18), 600),
        _entry(_day(local_tz, 2, 9), 800),
        _entry(_day(local_tz, 30, 9, month=9), 5000),
        _entry(datetime(2025, 11, 1, 0, 0, tzinfo=local_tz), 5000),
    ]
    weeks = monthly_grid(entries, 2025, 10, GOAL, local_tz)
    cells = [cell for week in weeks for cell in week if cell is not None]
    assert len(cells) == 31
    by_day = {cell.day.day: cell for cell in cells}
    assert by_day[1].total_ml == 2100
    assert by_day[1].met_goal
    assert by_day[2].total_ml == 800
    assert not by_day[2].met_goal
    assert sum(cell.total_ml for cell in cells) == 2900
    assert monthly_grid(entries, 2025, 10, GOAL, local_tz) == weeks


def test_daily_totals_and_history(local_tz: tzinfo) -> None:
    entries = [
        _entry(_day(local_tz, 13, 9), 250),
        _entry(_day(local_tz, 13, 10), 250),
        _entry(_day(local_tz, 15, 9), 2000),
    ]
    totals = daily_totals(entries, local_tz)
    assert list(totals["date"]) == [date(2025, 10, 13), date(2025, 10, 15)]
    assert list(totals["total_ml"]) == [500, 2000]

    history = daily_history(
        entries, date(2025, 10, 12), date(2025, 10, 15), GOAL, local_tz
    )
    assert list(history["total_ml"]) == [0, 500, 0, 2000]
    assert list(history["met_goal"]) == [False, False, False, True]
    assert set(history["goal_ml"]) == {GOAL}


def test_daily_totals_empty() -> None:
    out = daily_totals([])
    assert out.empty
    assert list(out.columns) == ["date", "total_ml"]


def test_month_title_and_headers() -> None:
    assert month_title(2025, 10) == "octubre de 2025"
    assert WEEKDAY_HEADERS[0] == "L"
    assert WEEKDAY_HEADERS[-1] == "D"
