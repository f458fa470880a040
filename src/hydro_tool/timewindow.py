"""Rangos de día y aritmética de calendario para cortar registros por fecha."""

from __future__ import annotations

from datetime import date, datetime, tzinfo

from dateutil.relativedelta import relativedelta


def start_of_day(d: datetime) -> datetime:
    """Return ``d``'s local calendar day at 00:00:00.000."""
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(d: datetime) -> datetime:
    """Return ``d``'s local calendar day at 23:59:59.999."""
    return d.replace(hour=23, minute=59, second=59, microsecond=999000)


def to_ms(d: datetime) -> int:
    """Milliseconds since epoch (naive datetimes are system local time)."""
    return round(d.timestamp() * 1000)


def from_ms(ms: int, tz: tzinfo | None = None) -> datetime:
    """Instant in milliseconds to a datetime in ``tz``."""
    return datetime.fromtimestamp(ms / 1000, tz=tz)


def day_range_ms(d: datetime) -> tuple[int, int]:
    """Inclusive ``(start_ms, end_ms)`` range of ``d``'s calendar day."""
    return to_ms(start_of_day(d)), to_ms(end_of_day(d))


def add_days(d: datetime, days: int) -> datetime:
    """Shift ``d`` by whole calendar days, keeping the wall-clock time.

    Uses calendar arithmetic so month/year rollover and DST changes keep the
    same local hour instead of drifting by the UTC offset.
    """
    return d + relativedelta(days=days)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of ``month`` (1-12)."""
    first = date(year, month, 1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def at_midnight(day: date, tz: tzinfo | None = None) -> datetime:
    """Local midnight of ``day`` in ``tz``."""
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Real milliseconds between two instants.

    Aware datetimes sharing a tzinfo subtract as wall-clock times; going
    through the epoch keeps DST transitions exact.
    """
    return to_ms(end) - to_ms(start)
