"""Modelos tipados para registros de hidratación y valores derivados."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum


class DrinkType(str, Enum):
    """Kind of beverage recorded in an entry."""

    WATER = "water"
    COFFEE = "coffee"
    TEA = "tea"
    OTHER = "other"


class PacingLabel(str, Enum):
    """Where the running total stands against the expected curve."""

    BEHIND = "behind"
    ON_PACE = "on_pace"
    AHEAD = "ahead"

    @property
    def text(self) -> str:
        """Etiqueta legible en castellano."""
        return _LABEL_TEXT[self]


_LABEL_TEXT: dict[PacingLabel, str] = {
    PacingLabel.BEHIND: "Vas por debajo",
    PacingLabel.ON_PACE: "Vas en ritmo",
    PacingLabel.AHEAD: "Vas por delante",
}


@dataclass(frozen=True)
class Entry:
    """One intake event (timestamped, in milliseconds since epoch)."""

    timestamp_ms: int
    amount_ml: int
    type: DrinkType = DrinkType.WATER
    note: str | None = None
    id: int | None = None

    def at(self, tz: tzinfo | None = None) -> datetime:
        """Return the entry instant as a datetime in ``tz``."""
        return datetime.fromtimestamp(self.timestamp_ms / 1000, tz=tz)


@dataclass(frozen=True)
class Settings:
    """User settings; defaults match a fresh install."""

    daily_goal_ml: int = 2000
    wake_hour: int = 9
    sleep_hour: int = 22
    step_minutes: int = 60
    quick_amounts_ml: tuple[int, ...] = (150, 250, 330, 500, 750)


@dataclass(frozen=True)
class DayStat:
    """Total intake for one calendar day."""

    day: date
    total_ml: int


@dataclass(frozen=True)
class PacingResult:
    """Actual vs expected comparison at a given instant."""

    expected_ml: int
    diff_ml: int
    label: PacingLabel


@dataclass(frozen=True)
class Guidance:
    """How much to drink before the next checkpoint."""

    at: datetime
    need_ml: int


@dataclass(frozen=True)
class WeeklyStats:
    """Last seven days (oldest first) and the goal streak."""

    days: tuple[DayStat, ...]
    streak: int


@dataclass(frozen=True)
class MonthCell:
    """One day cell of the monthly grid."""

    day: date
    total_ml: int
    met_goal: bool
