"""Inclusion groups: at most one entry per group tag survives an activation call."""
from __future__ import annotations

import logging
from typing import Sequence

from backend.app.models.lorebook import LorebookEntry

logger = logging.getLogger(__name__)


def _pick_winner(members: list[LorebookEntry]) -> LorebookEntry:
    # Highest insertion_order wins; the earliest member keeps ties.
    # group_weight is carried on entries but does not take part.
    winner = members[0]
    for candidate in members[1:]:
        if candidate.insertion_order > winner.insertion_order:
            winner = candidate
    return winner


def resolve_inclusion_groups(entries: Sequence[LorebookEntry]) -> list[LorebookEntry]:
    """Collapse each inclusion group to one winner.

    Returns ungrouped entries in input order, then one winner per group in
    the order each group was first seen.
    """
    grouped: dict[str, list[LorebookEntry]] = {}
    ungrouped: list[LorebookEntry] = []

    for entry in entries:
        if entry.inclusion_group:
            grouped.setdefault(entry.inclusion_group, []).append(entry)
        else:
            ungrouped.append(entry)

    winners: list[LorebookEntry] = []
    for group, members in grouped.items():
        if len(members) == 1:
            winners.append(members[0])
            continue
        winner = _pick_winner(members)
        logger.debug(
            "Inclusion group '%s': kept %s over %s",
            group, winner.id, [m.id for m in members if m is not winner],
        )
        winners.append(winner)

    return ungrouped + winners
