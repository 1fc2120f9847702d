"""Per-session activation state and activation reports.

``ActivationState`` is the only memory the engine carries between calls. It
belongs to exactly one conversation session: callers create one per session,
serialise calls that share it, and reset it when a new conversation begins.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass(frozen=True)
class EntryActivation:
    """Timing windows computed when an entry last activated (absolute turn indices)."""

    entry_id: str
    last_activated_at: int
    sticky_until: int | None = None
    cooldown_until: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "entryId": self.entry_id,
            "lastActivatedAt": self.last_activated_at,
        }
        if self.sticky_until is not None:
            out["stickyUntil"] = self.sticky_until
        if self.cooldown_until is not None:
            out["cooldownUntil"] = self.cooldown_until
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntryActivation":
        return cls(
            entry_id=str(data["entryId"]),
            last_activated_at=int(data["lastActivatedAt"]),
            sticky_until=_opt_int(data.get("stickyUntil")),
            cooldown_until=_opt_int(data.get("cooldownUntil")),
        )


def _opt_int(value: Any) -> int | None:
    return None if value is None else int(value)


class ActivationState:
    """Activation history for one conversation session, keyed by entry id."""

    def __init__(self, records: dict[str, EntryActivation] | None = None):
        self._records: dict[str, EntryActivation] = dict(records or {})

    def get(self, entry_id: str) -> EntryActivation | None:
        return self._records.get(entry_id)

    def record(self, activation: EntryActivation) -> None:
        """Store (or overwrite) the windows for an entry."""
        self._records[activation.entry_id] = activation

    def reset(self) -> None:
        """Forget every activation; call when a new conversation starts."""
        self._records.clear()

    # Name used by callers coming from the editor/session layer
    reset_activation_history = reset

    def copy(self) -> "ActivationState":
        return ActivationState(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._records

    def __iter__(self) -> Iterator[EntryActivation]:
        return iter(list(self._records.values()))

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {entry_id: rec.to_dict() for entry_id, rec in self._records.items()}

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, Any]] | None) -> "ActivationState":
        state = cls()
        for rec in (data or {}).values():
            state.record(EntryActivation.from_dict(rec))
        return state


@dataclass
class ActivationReport:
    """What one activation call did, in output order."""

    turn_index: int
    window: str = ""
    # Entry ids after group resolution and sorting
    resolved_ids: list[str] = field(default_factory=list)
    # Entry ids kept alive only by an open sticky window
    sticky_ids: list[str] = field(default_factory=list)
    # Entry ids dropped by inclusion-group resolution
    excluded_ids: list[str] = field(default_factory=list)
    # Entry ids appended by recursive scanning, in discovery order
    recursive_ids: list[str] = field(default_factory=list)
    contents: list[str] = field(default_factory=list)

    @property
    def entry_ids(self) -> list[str]:
        return self.resolved_ids + self.recursive_ids

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable summary for dev/debug."""
        return {
            "turn_index": self.turn_index,
            "entry_ids": self.entry_ids,
            "resolved_ids": list(self.resolved_ids),
            "sticky_ids": list(self.sticky_ids),
            "excluded_ids": list(self.excluded_ids),
            "recursive_ids": list(self.recursive_ids),
            "contents": list(self.contents),
        }
