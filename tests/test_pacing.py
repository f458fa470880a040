from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

import pytest

from hydro_tool.model import PacingLabel
from hydro_tool.pacing import (
    PACE_THRESHOLD_ML,
    active_window,
    classify,
    diff_text,
    expected_by_now,
    progress_percent,
    round_ml,
)
from hydro_tool.timewindow import elapsed_ms


def _at(local_tz: tzinfo, hour: int, minute: int = 0, day: int = 15) -> datetime:
    return datetime(2025, 10, day, hour, minute, tzinfo=local_tz)


@pytest.mark.parametrize(
    ("hour", "minute", "expected"),
    [
        (9, 0, 0),
        (15, 30, 1000),
        (22, 0, 2000),
        (6, 0, 0),
        (23, 30, 2000),
    ],
)
def test_expected_by_now_default_window(
    local_tz: tzinfo, hour: int, minute: int, expected: int
) -> None:
    now = _at(local_tz, hour, minute)
    assert expected_by_now(now, 9, 22, 2000) == expected


def test_expected_by_now_is_monotonic_inside_window(local_tz: tzinfo) -> None:
    now = _at(local_tz, 8, 0)
    last = -1
    while now <= _at(local_tz, 23, 0):
        value = expected_by_now(now, 9, 22, 2000)
        assert value >= last
        last = value
        now += timedelta(minutes=7)
    assert last == 2000


def test_expected_rounds_half_up(local_tz: tzinfo) -> None:
    # 3h of 13h: 2000 * 3 / 13 = 461.54
    assert expected_by_now(_at(local_tz, 12, 0), 9, 22, 2000) == 462
    assert round_ml(0.5) == 1
    assert round_ml(2.5) == 3


def test_overnight_window_after_wake(local_tz: tzinfo) -> None:
    start, end = active_window(_at(local_tz, 23, 0), 22, 7)
    assert elapsed_ms(start, end) == 9 * 3600 * 1000
    assert expected_by_now(_at(local_tz, 22, 0), 22, 7, 900) == 0
    assert expected_by_now(_at(local_tz, 23, 0), 22, 7, 900) == 100


def test_overnight_window_after_midnight_opens_on_the_same_day(
    local_tz: tzinfo,
) -> None:
    now = _at(local_tz, 2, 0, day=16)
    start, end = active_window(now, 22, 7)
    assert start == _at(local_tz, 22, 0, day=16)
    assert end == _at(local_tz, 7, 0, day=17)
    assert elapsed_ms(start, end) == 9 * 3600 * 1000
    assert expected_by_now(now, 22, 7, 900) == 0


def test_overnight_window_before_it_opens(local_tz: tzinfo) -> None:
    assert expected_by_now(_at(local_tz, 12, 0), 22, 7, 900) == 0


def test_same_wake_and_sleep_hour_spans_a_full_day(local_tz: tzinfo) -> None:
    start, end = active_window(_at(local_tz, 12, 0), 8, 8)
    assert elapsed_ms(start, end) == 24 * 3600 * 1000
    assert expected_by_now(_at(local_tz, 20, 0), 8, 8, 2400) == 1200


@pytest.mark.parametrize(
    ("actual", "expected", "label"),
    [
        (1000, 1000, PacingLabel.ON_PACE),
        (849, 1000, PacingLabel.BEHIND),
        (1149, 1000, PacingLabel.ON_PACE),
        (851, 1000, PacingLabel.ON_PACE),
        (850, 1000, PacingLabel.BEHIND),
        (1150, 1000, PacingLabel.AHEAD),
    ],
)
def test_classify_threshold_is_strict(
    actual: int, expected: int, label: PacingLabel
) -> None:
    result = classify(actual, expected)
    assert result.label is label
    assert result.diff_ml == actual - expected
    assert result.expected_ml == expected


def test_classify_labels_have_text() -> None:
    assert PACE_THRESHOLD_ML == 150
    assert classify(0, 500).label.text == "Vas por debajo"
    assert classify(500, 500).label.text == "Vas en ritmo"
    assert classify(900, 500).label.text == "Vas por delante"


def test_progress_percent_and_diff_text() -> None:
    assert progress_percent(0, 2000) == 0
    assert progress_percent(750, 2000) == 38
    assert progress_percent(2600, 2000) == 100
    assert diff_text(0) == "0 ml"
    assert diff_text(120) == "+120 ml"
    assert diff_text(-300) == "-300 ml"
