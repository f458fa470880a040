"""Persistencia SQLite para registros de bebida y ajustes."""

from __future__ import annotations

import json
import logging
import math
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from hydro_tool.model import DrinkType, Entry, Settings
from hydro_tool.settings import (
    DEFAULT_SETTINGS,
    InvalidSettingsError,
    settings_or_default,
    validate_settings,
)
from hydro_tool.timewindow import day_range_ms

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts INTEGER NOT NULL,
    amount_ml INTEGER NOT NULL,
    type TEXT NOT NULL,
    note TEXT
);

CREATE INDEX IF NOT EXISTS idx_entries_ts
ON entries(ts);
"""

_SETTINGS_KEYS = (
    "daily_goal_ml",
    "wake_hour",
    "sleep_hour",
    "step_minutes",
    "quick_amounts_ml",
)


class EntryRepository(ABC):
    """Read side the engine callers rely on."""

    @abstractmethod
    def entries_between(self, from_ms: int, to_ms: int) -> list[Entry]:
        """Entries whose timestamp falls in ``[from_ms, to_ms]``."""

    @abstractmethod
    def get_settings(self) -> Settings | None:
        """Stored settings, or None when never saved."""

    def load_settings(self) -> Settings:
        """Stored settings, or the defaults."""
        return settings_or_default(self.get_settings())

    def entries_for_day(self, day: datetime) -> list[Entry]:
        """Entries inside ``day``'s calendar day."""
        return self.entries_between(*day_range_ms(day))


class SQLiteStore(EntryRepository):
    """Repositorio SQLite para la app."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def add_entry(
        self,
        amount_ml: int,
        *,
        timestamp_ms: int,
        drink_type: DrinkType = DrinkType.WATER,
        note: str | None = None,
    ) -> int:
        """Guarda un registro y devuelve su id.

        Raises:
            ValueError: If ``amount_ml`` is not positive.
        """
        if amount_ml <= 0:
            raise ValueError(f"amount_ml must be positive, got {amount_ml}")
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO entries(ts, amount_ml, type, note) VALUES (?, ?, ?, ?)",
                (timestamp_ms, amount_ml, drink_type.value, note),
            )
            conn.commit()
            entry_id = int(cur.lastrowid)
        logger.info("Added entry %s: %s ml of %s", entry_id, amount_ml, drink_type.value)
        return entry_id

    def delete_entry(self, entry_id: int) -> bool:
        """Borra un registro. Devuelve False si no existía."""
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
            conn.commit()
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted entry %s", entry_id)
        else:
            logger.debug("Entry %s not found, nothing deleted", entry_id)
        return deleted

    def undo_last(self) -> Entry | None:
        """Borra el último registro añadido y lo devuelve."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, ts, amount_ml, type, note FROM entries "
                "ORDER BY id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        entry = _entry_from_row(row)
        self.delete_entry(int(row["id"]))
        return entry

    def entries_between(self, from_ms: int, to_ms: int) -> list[Entry]:
        """Registros en el rango inclusivo, ordenados por fecha."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, ts, amount_ml, type, note
                FROM entries
                WHERE ts BETWEEN ? AND ?
                ORDER BY ts, id
                """,
                (from_ms, to_ms),
            ).fetchall()
        return [_entry_from_row(row) for row in rows]

    def get_settings(self) -> Settings | None:
        """Ajustes guardados, o None si nunca se guardaron."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_settings").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        if not values:
            return None
        try:
            return validate_settings(_settings_from_values(values))
        except InvalidSettingsError as exc:
            logger.warning("Stored settings are invalid (%s), using defaults", exc)
            return DEFAULT_SETTINGS

    def save_settings(self, settings: Settings) -> Settings:
        """Valida y guarda los ajustes en la tabla key/value.

        Raises:
            InvalidSettingsError: If the settings do not validate.
        """
        settings = validate_settings(settings)
        payload = {
            "daily_goal_ml": str(settings.daily_goal_ml),
            "wake_hour": str(settings.wake_hour),
            "sleep_hour": str(settings.sleep_hour),
            "step_minutes": str(settings.step_minutes),
            "quick_amounts_ml": json.dumps(list(settings.quick_amounts_ml)),
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_settings(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()
        logger.info("Saved settings: %s", settings)
        return settings


def _entry_from_row(row: sqlite3.Row) -> Entry:
    return Entry(
        id=int(row["id"]),
        timestamp_ms=int(row["ts"]),
        amount_ml=int(row["amount_ml"]),
        type=_parse_drink_type(row["type"]),
        note=row["note"],
    )


def _parse_drink_type(raw: object) -> DrinkType:
    try:
        return DrinkType(str(raw))
    except ValueError:
        return DrinkType.OTHER


def _parse_int(raw: str | None, fallback: int) -> int:
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring unparsable setting value %r", raw)
        return fallback


def _parse_json_ints(raw: str | None, fallback: tuple[int, ...]) -> tuple[int, ...]:
    if raw is None:
        return fallback
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return fallback
    if not isinstance(parsed, list):
        return fallback
    out = tuple(int(item) for item in parsed if _is_number(item))
    return out or fallback


def _is_number(item: object) -> bool:
    # bool is an int subclass; JSON true must not load as 1
    if isinstance(item, bool):
        return False
    return isinstance(item, int) or (isinstance(item, float) and math.isfinite(item))


def _settings_from_values(values: dict[str, str]) -> Settings:
    """Merge stored values over the defaults; bad values fall back."""
    d = DEFAULT_SETTINGS
    merged = Settings(
        daily_goal_ml=_parse_int(values.get("daily_goal_ml"), d.daily_goal_ml),
        wake_hour=_parse_int(values.get("wake_hour"), d.wake_hour),
        sleep_hour=_parse_int(values.get("sleep_hour"), d.sleep_hour),
        step_minutes=_parse_int(values.get("step_minutes"), d.step_minutes),
        quick_amounts_ml=_parse_json_ints(
            values.get("quick_amounts_ml"), d.quick_amounts_ml
        ),
    )
    unknown = set(values) - set(_SETTINGS_KEYS)
    if unknown:
        logger.debug("Ignoring unknown settings keys: %s", sorted(unknown))
    return merged
