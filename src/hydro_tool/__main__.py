"""Punto de entrada ``python -m hydro_tool``."""

from __future__ import annotations

from hydro_tool.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
