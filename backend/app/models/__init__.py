"""Application models (lorebooks, entries, activation state)."""
from .activation import ActivationReport, ActivationState, EntryActivation
from .lorebook import (
    Lorebook,
    LorebookEntry,
    create_default_lorebook,
    create_entry,
)

__all__ = [
    "ActivationReport",
    "ActivationState",
    "EntryActivation",
    "Lorebook",
    "LorebookEntry",
    "create_default_lorebook",
    "create_entry",
]
