"""Validación y valores por defecto de los ajustes del usuario."""

from __future__ import annotations

import re
from dataclasses import replace

from hydro_tool.model import Settings

DEFAULT_SETTINGS = Settings()

_QUICK_SPLIT = re.compile(r"[,\s]+")


class InvalidSettingsError(ValueError):
    """Raised when settings would make the pacing math meaningless."""


def validate_settings(settings: Settings) -> Settings:
    """Check settings before they reach the engine.

    Args:
        settings: Candidate settings.

    Returns:
        The same settings, with quick amounts deduplicated and sorted.

    Raises:
        InvalidSettingsError: If any value is out of range.
    """
    if settings.daily_goal_ml <= 0:
        raise InvalidSettingsError(
            f"daily_goal_ml must be positive, got {settings.daily_goal_ml}"
        )
    if settings.step_minutes <= 0:
        raise InvalidSettingsError(
            f"step_minutes must be positive, got {settings.step_minutes}"
        )
    for name in ("wake_hour", "sleep_hour"):
        hour = getattr(settings, name)
        if not 0 <= hour <= 23:
            raise InvalidSettingsError(f"{name} must be in 0..23, got {hour}")
    if not settings.quick_amounts_ml:
        raise InvalidSettingsError("quick_amounts_ml must not be empty")
    if any(q <= 0 for q in settings.quick_amounts_ml):
        raise InvalidSettingsError(
            f"quick_amounts_ml must be positive, got {settings.quick_amounts_ml}"
        )
    quick = tuple(sorted(set(settings.quick_amounts_ml)))
    return replace(settings, quick_amounts_ml=quick)


def settings_or_default(settings: Settings | None) -> Settings:
    """Return stored settings, or the defaults when there are none."""
    return DEFAULT_SETTINGS if settings is None else settings


def parse_quick_amounts(text: str) -> tuple[int, ...] | None:
    """Parse ``"150, 250 330"`` into sorted unique positive amounts.

    Non-numeric and non-positive parts are dropped. Returns None when nothing
    valid remains.
    """
    values: set[int] = set()
    for part in _QUICK_SPLIT.split(text.strip()):
        if not part:
            continue
        try:
            value = float(part)
        except ValueError:
            continue
        if value > 0 and value != float("inf"):
            values.add(int(round(value)))
    values.discard(0)
    if not values:
        return None
    return tuple(sorted(values))
