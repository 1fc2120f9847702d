"""Temporal gate for lorebook entries: delay, cooldown and sticky windows.

All windows are measured in turn (message) indices, never wall-clock time.
Windows are fixed when an entry activates and are not recomputed later, so
an entry with both sticky and cooldown stays alive until ``sticky_until``
and cannot re-trigger until ``cooldown_until`` from that same activation.
"""
from __future__ import annotations

from backend.app.models.activation import ActivationState, EntryActivation
from backend.app.models.lorebook import LorebookEntry


def is_delayed(entry: LorebookEntry, turn_index: int) -> bool:
    """Entry may not activate before turn ``delay``."""
    return bool(entry.delay) and turn_index < entry.delay


def is_cooling_down(state: ActivationState, entry: LorebookEntry, turn_index: int) -> bool:
    rec = state.get(entry.id)
    return rec is not None and bool(rec.cooldown_until) and turn_index < rec.cooldown_until


def is_sticky(state: ActivationState, entry: LorebookEntry, turn_index: int) -> bool:
    """Entry is force-included while its sticky window is open, matched or not."""
    rec = state.get(entry.id)
    return rec is not None and bool(rec.sticky_until) and turn_index < rec.sticky_until


def record_activation(state: ActivationState, entry: LorebookEntry, turn_index: int) -> EntryActivation:
    """Overwrite the entry's windows as of ``turn_index`` and return the new record."""
    activation = EntryActivation(
        entry_id=entry.id,
        last_activated_at=turn_index,
        sticky_until=turn_index + entry.sticky if entry.sticky else None,
        cooldown_until=turn_index + entry.cooldown if entry.cooldown else None,
    )
    state.record(activation)
    return activation
