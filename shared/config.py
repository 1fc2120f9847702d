"""Shared configuration constants used by the engine and the CLI."""
from __future__ import annotations

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    """Read integer env value; falls back to default when unset or not a number."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Project root: resolve relative to this file's location
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Where bare lorebook names are looked up (CLI and loader)
LOREBOOK_DATA_DIR = os.environ.get("LOREBOOK_DATA_DIR", str(_PROJECT_ROOT / "data" / "lorebooks"))

# Root log level for CLI entry points
LOREKEEPER_LOG_LEVEL = os.environ.get("LOREKEEPER_LOG_LEVEL", "INFO").strip().upper() or "INFO"
