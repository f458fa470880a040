"""CLI para registrar agua y consultar el ritmo diario y el histórico."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from dateutil import tz

from hydro_tool.excel_writer import ExcelLayout, write_history_xlsx
from hydro_tool.history import (
    WEEKDAY_HEADERS,
    WEEKDAY_SHORT,
    daily_history,
    entries_to_frame,
    month_title,
    monthly_grid,
    weekly_stats,
)
from hydro_tool.model import DrinkType, MonthCell
from hydro_tool.pacing import diff_text
from hydro_tool.settings import InvalidSettingsError, parse_quick_amounts
from hydro_tool.status import today_status
from hydro_tool.storage import SQLiteStore
from hydro_tool.timewindow import (
    add_days,
    at_midnight,
    end_of_day,
    month_bounds,
    start_of_day,
    to_ms,
)

logger = logging.getLogger(__name__)

_LOCAL_TZ = tz.tzlocal()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Registro de hidratación: ritmo diario, semana y mes."
    )
    parser.add_argument(
        "--db",
        default=str(Path.home() / ".hydro_tool" / "hydro.sqlite3"),
        help="Base de datos SQLite (default: ~/.hydro_tool/hydro.sqlite3).",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Mostrar logs informativos."
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Estado de hoy (default).")
    sub.add_parser("today", help="Registros de hoy, del más reciente al más antiguo.")

    add = sub.add_parser("add", help="Registrar una bebida ahora.")
    add.add_argument("amount", type=int, help="Cantidad en ml.")
    add.add_argument(
        "--type",
        default=DrinkType.WATER.value,
        choices=[t.value for t in DrinkType],
        help="Tipo de bebida.",
    )
    add.add_argument("--note", default=None, help="Nota opcional.")

    sub.add_parser("undo", help="Deshacer el último registro.")

    delete = sub.add_parser("delete", help="Borrar un registro por id.")
    delete.add_argument("entry_id", type=int)

    sub.add_parser("week", help="Últimos 7 días y racha.")

    month = sub.add_parser("month", help="Calendario del mes.")
    month.add_argument("--year", type=int, default=None)
    month.add_argument("--month", type=int, default=None, choices=range(1, 13))

    settings = sub.add_parser("settings", help="Ver o cambiar ajustes.")
    settings.add_argument("--goal", type=int, default=None, help="Objetivo diario (ml).")
    settings.add_argument("--wake", type=int, default=None, help="Hora de inicio.")
    settings.add_argument("--sleep", type=int, default=None, help="Hora de fin.")
    settings.add_argument("--step", type=int, default=None, help="Intervalo (min).")
    settings.add_argument(
        "--quick", default=None, help='Cantidades rápidas, ej: "150, 250, 500".'
    )

    export = sub.add_parser("export", help="Exportar histórico diario a Excel.")
    export.add_argument(
        "--days", type=int, default=30, help="Días hacia atrás (default: 30)."
    )
    export.add_argument("--out", default=None, help="Ruta del .xlsx de salida.")

    return parser.parse_args(argv)


def _now() -> datetime:
    return datetime.now(tz=_LOCAL_TZ)


def _cmd_status(store: SQLiteStore, _: argparse.Namespace) -> int:
    now = _now()
    settings = store.load_settings()
    status = today_status(store.entries_for_day(now), settings, now)
    pacing = status.pacing
    print(f"Hoy: {status.total_ml} ml / {status.goal_ml} ml ({status.percent}%)")
    print(f"A esta hora: {pacing.expected_ml} ml")
    print(f"{pacing.label.text} ({diff_text(pacing.diff_ml)})")
    if status.show_guidance:
        at = status.guidance.at.strftime("%H:%M")
        print(
            f"Bebe {status.guidance.need_ml} ml antes de {at} "
            f"(botón sugerido: {status.recommended_ml} ml)"
        )
    return 0


def _cmd_today(store: SQLiteStore, _: argparse.Namespace) -> int:
    now = _now()
    entries = sorted(
        store.entries_for_day(now),
        key=lambda e: (e.timestamp_ms, e.id or 0),
        reverse=True,
    )
    if not entries:
        print("Sin registros hoy.")
        return 0
    for e in entries:
        note = f"  {e.note}" if e.note else ""
        print(f"#{e.id}  {e.at(_LOCAL_TZ):%H:%M}  {e.amount_ml} ml  {e.type.value}{note}")
    return 0


def _cmd_add(store: SQLiteStore, ns: argparse.Namespace) -> int:
    entry_id = store.add_entry(
        ns.amount,
        timestamp_ms=to_ms(_now()),
        drink_type=DrinkType(ns.type),
        note=ns.note,
    )
    print(f"OK: +{ns.amount} ml (#{entry_id})")
    return 0


def _cmd_undo(store: SQLiteStore, _: argparse.Namespace) -> int:
    entry = store.undo_last()
    if entry is None:
        print("Nada que deshacer.")
        return 0
    print(f"OK: deshecho #{entry.id} ({entry.amount_ml} ml)")
    return 0


def _cmd_delete(store: SQLiteStore, ns: argparse.Namespace) -> int:
    if not store.delete_entry(ns.entry_id):
        print(f"No existe el registro #{ns.entry_id}.")
        return 1
    print(f"OK: borrado #{ns.entry_id}")
    return 0


def _cmd_week(store: SQLiteStore, _: argparse.Namespace) -> int:
    now = _now()
    settings = store.load_settings()
    first = start_of_day(add_days(now, -6))
    entries = store.entries_between(to_ms(first), to_ms(end_of_day(now)))
    stats = weekly_stats(entries, now, settings.daily_goal_ml)
    for stat in stats.days:
        mark = "*" if stat.total_ml >= settings.daily_goal_ml else " "
        label = WEEKDAY_SHORT[stat.day.weekday()]
        print(f"{label} {stat.day:%d/%m}  {stat.total_ml:>6} ml {mark}")
    print(f"Objetivo: {settings.daily_goal_ml} ml")
    print(f"Racha: {stats.streak} días")
    return 0


def _format_cell(cell: MonthCell | None) -> str:
    if cell is None:
        return "    "
    mark = "*" if cell.met_goal else " "
    return f"{cell.day.day:>3}{mark}"


def _cmd_month(store: SQLiteStore, ns: argparse.Namespace) -> int:
    now = _now()
    year = ns.year or now.year
    month = ns.month or now.month
    settings = store.load_settings()
    first, last = month_bounds(year, month)
    entries = store.entries_between(
        to_ms(at_midnight(first, _LOCAL_TZ)),
        to_ms(end_of_day(at_midnight(last, _LOCAL_TZ))),
    )
    weeks = monthly_grid(entries, year, month, settings.daily_goal_ml, _LOCAL_TZ)
    print(month_title(year, month).capitalize())
    print("".join(f"{h:>3} " for h in WEEKDAY_HEADERS))
    for week in weeks:
        print("".join(_format_cell(cell) for cell in week))
    met = sum(1 for week in weeks for cell in week if cell is not None and cell.met_goal)
    print(f"Días con objetivo cumplido: {met}")
    return 0


def _cmd_settings(store: SQLiteStore, ns: argparse.Namespace) -> int:
    current = store.load_settings()
    changes: dict[str, object] = {}
    if ns.goal is not None:
        changes["daily_goal_ml"] = ns.goal
    if ns.wake is not None:
        changes["wake_hour"] = ns.wake
    if ns.sleep is not None:
        changes["sleep_hour"] = ns.sleep
    if ns.step is not None:
        changes["step_minutes"] = ns.step
    if ns.quick is not None:
        quick = parse_quick_amounts(ns.quick)
        if quick is None:
            raise InvalidSettingsError(f"no valid quick amounts in {ns.quick!r}")
        changes["quick_amounts_ml"] = quick
    if changes:
        current = store.save_settings(replace(current, **changes))
        print("OK: ajustes guardados")
    print(f"Objetivo diario: {current.daily_goal_ml} ml")
    print(f"Ventana: {current.wake_hour:02d}:00 - {current.sleep_hour:02d}:00")
    print(f"Intervalo: {current.step_minutes} min")
    print("Cantidades rápidas: " + ", ".join(str(q) for q in current.quick_amounts_ml))
    return 0


def _cmd_export(store: SQLiteStore, ns: argparse.Namespace) -> int:
    now = _now()
    settings = store.load_settings()
    first = start_of_day(add_days(now, -(max(1, ns.days) - 1)))
    entries = store.entries_between(to_ms(first), to_ms(end_of_day(now)))
    daily = daily_history(
        entries, first.date(), now.date(), settings.daily_goal_ml, _LOCAL_TZ
    )

    if ns.out:
        out_path = Path(ns.out).expanduser()
    else:
        ts = now.strftime("%Y-%m-%d_%H-%M-%S")
        out_dir = Path(ns.db).expanduser().parent / "salidas"
        out_path = out_dir / f"hidratacion_diaria_{ts}.xlsx"

    write_history_xlsx(
        daily, out_path, ExcelLayout(), entries_df=entries_to_frame(entries, _LOCAL_TZ)
    )
    print(f"OK: Días exportados: {len(daily)}")
    print(f"OK: Output: {out_path}")
    return 0


_COMMANDS = {
    "status": _cmd_status,
    "today": _cmd_today,
    "add": _cmd_add,
    "undo": _cmd_undo,
    "delete": _cmd_delete,
    "week": _cmd_week,
    "month": _cmd_month,
    "settings": _cmd_settings,
    "export": _cmd_export,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the hydration CLI.

    Returns:
        Exit code (0 on success, 2 on invalid input).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    store = SQLiteStore(Path(ns.db).expanduser())
    handler = _COMMANDS[ns.command or "status"]
    try:
        return handler(store, ns)
    except ValueError as exc:
        logger.debug("Command %s failed", ns.command, exc_info=True)
        print(f"ERROR: {exc}")
        return 2
