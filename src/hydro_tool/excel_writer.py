"""Generación de Excel con el histórico diario de hidratación."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from hydro_tool.history import WEEKDAY_SHORT

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "datetime": "Fecha / Hora",
    "total_ml": "Total (ml)",
    "goal_ml": "Objetivo (ml)",
    "met_goal": "Cumplido",
    "amount_ml": "Cantidad (ml)",
    "type": "Tipo",
    "note": "Nota",
}

_MET_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the history workbook."""

    sheet_name: str = "Resumen diario"
    entries_sheet_name: str = "Registros"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return WEEKDAY_SHORT[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def _add_weekday_column(export_df: pd.DataFrame) -> pd.DataFrame:
    """Añade columna weekday (Día) a partir de date."""
    if "date" not in export_df.columns or export_df.empty:
        return export_df
    weekday_series = pd.to_datetime(export_df["date"]).dt.weekday
    export_df = export_df.copy()
    export_df["weekday"] = weekday_series.map(_weekday_label)
    cols = ["weekday"] + [c for c in export_df.columns if c != "weekday"]
    return export_df[cols]


def _prepare_entries(entries_df: pd.DataFrame) -> pd.DataFrame:
    """Quita timezone de datetime y deja solo columnas exportables."""
    export_df = entries_df.copy()
    if "datetime" in export_df.columns and not export_df.empty:
        export_df["datetime"] = [
            pd.Timestamp(d).tz_localize(None) if pd.Timestamp(d).tzinfo else d
            for d in export_df["datetime"]
        ]
    keep = [c for c in ("datetime", "amount_ml", "type", "note") if c in export_df]
    return export_df[keep]


def _prepare_daily(daily_df: pd.DataFrame) -> pd.DataFrame:
    export_df = _add_weekday_column(daily_df)
    if "met_goal" in export_df.columns:
        export_df = export_df.copy()
        export_df["met_goal"] = export_df["met_goal"].map(
            lambda met: "sí" if bool(met) else "no"
        )
    return export_df


def write_history_xlsx(
    daily_df: pd.DataFrame,
    out_path: Path,
    layout: ExcelLayout,
    entries_df: pd.DataFrame | None = None,
) -> None:
    """Write the daily history (and optionally raw entries) to Excel.

    Args:
        daily_df: One row per day (date, total_ml, goal_ml, met_goal).
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
        entries_df: Optional per-entry frame for a second sheet.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    daily_export = _prepare_daily(daily_df).rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        daily_export.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws)
        _highlight_met_days(ws)

        if entries_df is not None:
            entries_export = _prepare_entries(entries_df).rename(columns=_HEADER_MAP)
            entries_export.to_excel(
                writer, index=False, sheet_name=layout.entries_sheet_name
            )
            _format_sheet(writer.book[layout.entries_sheet_name])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación, borde y altura fija a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        ws.row_dimensions[row[0].row].height = 15


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Día", 6),
        ("Fecha", 12),
        ("Fecha / Hora", 18),
        ("Total (ml)", 12),
        ("Objetivo (ml)", 14),
        ("Cumplido", 10),
        ("Cantidad (ml)", 14),
        ("Tipo", 10),
        ("Nota", 24),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha": "dd/mm/yyyy",
        "Fecha / Hora": "dd/mm/yyyy hh:mm",
        "Total (ml)": "#,##0",
        "Objetivo (ml)": "#,##0",
        "Cantidad (ml)": "#,##0",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _highlight_met_days(ws: Any) -> None:
    """Rellena en verde las filas de días con el objetivo cumplido."""
    idx = _get_header_col_index(ws).get("Cumplido")
    if idx is None:
        return
    for row in ws.iter_rows(min_row=2):
        if row[idx - 1].value == "sí":
            for cell in row:
                cell.fill = _MET_FILL


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
