"""Recursive scanning: activated entry content can trigger further entries.

A bounded fixed point. Each round searches the joined content of every
active entry; the loop ends when a round finds nothing new or after
``max_depth`` rounds. Delay and cooldown are not consulted here.
"""
from __future__ import annotations

import logging
from typing import Sequence

from backend.app.config import MAX_RECURSION_DEPTH
from backend.app.core.lore_matcher import entry_matches
from backend.app.models.lorebook import Lorebook, LorebookEntry

logger = logging.getLogger(__name__)


def expand_recursively(
    activated: Sequence[LorebookEntry],
    lorebook: Lorebook,
    *,
    max_depth: int = MAX_RECURSION_DEPTH,
) -> list[LorebookEntry]:
    """Return entries reachable from ``activated`` content, in discovery order.

    Returns an empty list when the lorebook has recursive scanning disabled.
    """
    if not lorebook.recursive_scanning:
        return []

    active: list[LorebookEntry] = list(activated)
    active_ids = {e.id for e in active}
    discovered: list[LorebookEntry] = []

    for depth in range(max_depth):
        text = " ".join(e.content for e in active)
        found = [
            entry for entry in lorebook.entries
            if entry.enabled and entry.id not in active_ids and entry_matches(text, entry)
        ]
        if not found:
            break
        logger.debug("Recursive scan depth %d found %s", depth + 1, [e.id for e in found])
        for entry in found:
            active_ids.add(entry.id)
        active.extend(found)
        discovered.extend(found)

    return discovered
