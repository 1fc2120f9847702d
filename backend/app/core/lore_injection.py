"""Prompt framing for activated lorebook content (caller side; the engine never calls this)."""
from __future__ import annotations

from typing import Sequence

DEFAULT_HEADER = "The following is situational knowledge relevant to the current scene:"


def format_lore_injection(
    contents: Sequence[str],
    header: str = DEFAULT_HEADER,
    *,
    bullet: str = "- ",
) -> str:
    """Frame activated entry contents as one block placed before the live turn."""
    lines = [f"{bullet}{c.strip()}" for c in contents if c and c.strip()]
    if not lines:
        return ""
    return "\n".join([header, *lines])
