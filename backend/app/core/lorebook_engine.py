"""Lorebook activation: decide which entries are injected for the current turn.

Usage:
    session = LorebookSession()
    contents = session.activate(lorebook, recent_messages, turn_index)

Or, with caller-owned state:
    activate(lorebook, recent_messages, turn_index, state) -> list[str]

Pipeline per call: temporal pre-checks and keyword matching, sticky
carry-over, inclusion-group resolution, stable sort by insertion order,
temporal state update, then recursive scanning (appended in discovery
order). The only mutable memory is the ``ActivationState`` passed in, which
must belong to a single conversation session. The engine does no locking;
callers serialise calls that share a state.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from backend.app.config import MAX_RECURSION_DEPTH
from backend.app.core.error_handling import LorebookShapeError, log_error_with_context
from backend.app.core.inclusion_groups import resolve_inclusion_groups
from backend.app.core.lore_matcher import build_scan_window, entry_matches
from backend.app.core.lore_recursion import expand_recursively
from backend.app.core.lore_timing import (
    is_cooling_down,
    is_delayed,
    is_sticky,
    record_activation,
)
from backend.app.models.activation import ActivationReport, ActivationState
from backend.app.models.lorebook import Lorebook, LorebookEntry
from backend.app.world.lorebook_loader import parse_lorebook

logger = logging.getLogger(__name__)


def _coerce_lorebook(lorebook: Any) -> Lorebook:
    """Accept a Lorebook or a raw mapping; anything without entries is a shape error."""
    if isinstance(lorebook, Lorebook):
        if lorebook.entries is None:
            raise LorebookShapeError(f"lorebook {lorebook.id!r} has no entries collection")
        return lorebook
    if isinstance(lorebook, Mapping):
        return parse_lorebook(dict(lorebook))
    raise LorebookShapeError(
        f"expected a Lorebook or mapping, got {type(lorebook).__name__}"
    )


def _validate_turn_index(turn_index: int) -> None:
    if isinstance(turn_index, bool) or not isinstance(turn_index, int):
        raise TypeError(f"turn index must be an int, got {type(turn_index).__name__}")
    if turn_index < 0:
        raise ValueError(f"turn index must be non-negative, got {turn_index}")


def run_activation(
    lorebook: Lorebook | Mapping[str, Any] | None,
    recent_messages: Sequence[str] | None,
    current_turn_index: int,
    state: ActivationState,
    *,
    newest_first: bool = False,
    max_depth: int = MAX_RECURSION_DEPTH,
) -> ActivationReport:
    """Activate entries for one turn and return the full report.

    Args:
        lorebook: Lorebook (or its JSON mapping); None yields an empty report
        recent_messages: Message texts, chronological unless ``newest_first``
        current_turn_index: Absolute, non-negative turn index for this call
        state: Activation history of this session; updated in place
        newest_first: Treat ``recent_messages`` as newest-first
        max_depth: Recursive scanning round limit

    Raises:
        LorebookShapeError: lorebook lacks an entries collection or fails validation
        ValueError: negative turn index
        TypeError: turn index is not an int
    """
    report = ActivationReport(turn_index=current_turn_index)
    if lorebook is None:
        return report
    book = _coerce_lorebook(lorebook)
    if not book.entries:
        return report
    _validate_turn_index(current_turn_index)

    window = build_scan_window(recent_messages, book.scan_depth, newest_first=newest_first)
    report.window = window

    candidates: list[LorebookEntry] = []
    sticky_only: set[str] = set()
    for entry in book.entries:
        if not entry.enabled:
            continue
        carried = is_sticky(state, entry, current_turn_index)
        matched = (
            not is_delayed(entry, current_turn_index)
            and not is_cooling_down(state, entry, current_turn_index)
            and entry_matches(window, entry)
        )
        if matched or carried:
            candidates.append(entry)
        if carried and not matched:
            sticky_only.add(entry.id)

    resolved = resolve_inclusion_groups(candidates)
    resolved_ids = {e.id for e in resolved}
    report.excluded_ids = [e.id for e in candidates if e.id not in resolved_ids]

    # list.sort is stable: equal orders keep their relative position
    resolved.sort(key=lambda e: e.insertion_order)

    for entry in resolved:
        if entry.id in sticky_only:
            continue
        record_activation(state, entry, current_turn_index)

    discovered = expand_recursively(resolved, book, max_depth=max_depth)

    report.resolved_ids = [e.id for e in resolved]
    report.sticky_ids = [e.id for e in resolved if e.id in sticky_only]
    report.recursive_ids = [e.id for e in discovered]
    report.contents = [e.content for e in resolved + discovered]

    logger.debug(
        "Lorebook %s turn %d: %d resolved (%d sticky, %d excluded), %d recursive",
        book.id, current_turn_index, len(report.resolved_ids), len(report.sticky_ids),
        len(report.excluded_ids), len(report.recursive_ids),
    )
    return report


def activate(
    lorebook: Lorebook | Mapping[str, Any] | None,
    recent_messages: Sequence[str] | None,
    current_turn_index: int,
    state: ActivationState,
    *,
    newest_first: bool = False,
) -> list[str]:
    """Return the content strings to inject for this turn, in insertion order."""
    return run_activation(
        lorebook, recent_messages, current_turn_index, state, newest_first=newest_first,
    ).contents


class LorebookSession:
    """One conversation's activation engine. Owns its ActivationState.

    Never share a session (or its state) between conversations. Calls on
    the same session must be serialised by the caller.
    """

    def __init__(self, session_id: str | None = None, state: ActivationState | None = None):
        self.session_id = session_id
        self.state = state if state is not None else ActivationState()

    def run(
        self,
        lorebook: Lorebook | Mapping[str, Any] | None,
        recent_messages: Sequence[str] | None,
        current_turn_index: int,
        *,
        newest_first: bool = False,
    ) -> ActivationReport:
        try:
            report = run_activation(
                lorebook, recent_messages, current_turn_index, self.state, newest_first=newest_first,
            )
        except LorebookShapeError as e:
            log_error_with_context(
                e, "activate",
                lorebook_id=getattr(lorebook, "id", None),
                turn_index=current_turn_index,
                session_id=self.session_id,
            )
            raise
        if report.entry_ids:
            logger.debug(
                "Session %s turn %d activated %s",
                self.session_id or "-", current_turn_index, report.entry_ids,
            )
        return report

    def activate(
        self,
        lorebook: Lorebook | Mapping[str, Any] | None,
        recent_messages: Sequence[str] | None,
        current_turn_index: int,
        *,
        newest_first: bool = False,
    ) -> list[str]:
        return self.run(
            lorebook, recent_messages, current_turn_index, newest_first=newest_first,
        ).contents

    def reset_activation_history(self) -> None:
        """Start a new conversation: forget all sticky/cooldown windows."""
        self.state.reset()
        logger.info("Session %s: activation history reset", self.session_id or "-")
