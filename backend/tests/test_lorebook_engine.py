"""Tests for the activation orchestrator: gating, sticky carry-over, groups, ordering, recursion."""
from __future__ import annotations

import logging

import pytest

from backend.app.core.error_handling import LorebookShapeError
from backend.app.core.lorebook_engine import LorebookSession, activate, run_activation
from backend.app.models.activation import ActivationState, EntryActivation


@pytest.fixture
def session():
    return LorebookSession(session_id="test")


# --- preconditions ---

def test_absent_lorebook_returns_empty_without_state_change():
    state = ActivationState()
    assert activate(None, ["sword"], 0, state) == []
    assert len(state) == 0


def test_empty_entries_returns_empty(make_lorebook):
    state = ActivationState()
    assert activate(make_lorebook([]), ["sword"], 0, state) == []
    assert len(state) == 0


def test_mapping_without_entries_is_shape_error():
    with pytest.raises(LorebookShapeError):
        activate({"id": "broken", "name": "no entries"}, ["sword"], 0, ActivationState())


def test_object_without_entries_is_shape_error():
    with pytest.raises(LorebookShapeError):
        activate(object(), ["sword"], 0, ActivationState())


def test_invalid_mapping_is_shape_error():
    doc = {"id": "b", "entries": [{"id": "e", "keys": ["x"], "content": "c"}]}  # no insertionOrder
    with pytest.raises(LorebookShapeError):
        activate(doc, ["x"], 0, ActivationState())


def test_camel_case_mapping_is_accepted():
    doc = {
        "id": "b",
        "entries": [{"id": "e", "keys": ["sword"], "content": "blade lore", "insertionOrder": 5}],
    }
    assert activate(doc, ["a sword"], 0, ActivationState()) == ["blade lore"]


def test_negative_turn_index_rejected(make_entry, make_lorebook):
    with pytest.raises(ValueError):
        activate(make_lorebook([make_entry("sword")]), ["sword"], -1, ActivationState())


# --- disabled / delay ---

def test_disabled_entry_never_appears_even_when_sticky(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword", enabled=False)])
    state = ActivationState()
    state.record(EntryActivation("sword", 0, sticky_until=100))
    assert activate(book, ["sword"], 1, state) == []


@pytest.mark.parametrize("turn", [0, 1, 4])
def test_delay_blocks_perfect_match(make_entry, make_lorebook, turn):
    book = make_lorebook([make_entry("sword", delay=5)])
    assert activate(book, ["sword"], turn, ActivationState()) == []


def test_delay_lifts_at_threshold(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword", delay=5)])
    assert activate(book, ["sword"], 5, ActivationState()) == ["sword content"]


# --- cooldown ---

def test_cooldown_excludes_within_window(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", cooldown=3)])
    assert session.activate(book, ["sword"], 2) == ["sword content"]
    assert session.activate(book, ["sword"], 2) == []
    assert session.activate(book, ["sword"], 3) == []
    assert session.activate(book, ["sword"], 4) == []
    assert session.activate(book, ["sword"], 5) == ["sword content"]


# --- sticky ---

def test_sticky_keeps_entry_without_match(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", sticky=3)])
    assert session.activate(book, ["sword"], 1) == ["sword content"]
    assert session.activate(book, ["nothing"], 2) == ["sword content"]
    assert session.activate(book, ["nothing"], 3) == ["sword content"]
    assert session.activate(book, ["nothing"], 4) == []


def test_sticky_carry_does_not_extend_window(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", sticky=2)])
    session.activate(book, ["sword"], 0)
    session.activate(book, ["nothing"], 1)
    assert session.state.get("sword").sticky_until == 2
    assert session.state.get("sword").last_activated_at == 0


def test_rematch_refreshes_sticky_window(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", sticky=2)])
    session.activate(book, ["sword"], 0)
    session.activate(book, ["sword"], 1)
    assert session.activate(book, ["nothing"], 2) == ["sword content"]
    assert session.activate(book, ["nothing"], 3) == []


def test_sticky_then_cooldown_from_same_activation(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", sticky=2, cooldown=4)])
    assert session.activate(book, ["sword"], 0) == ["sword content"]
    assert session.activate(book, ["sword"], 1) == ["sword content"]
    assert session.activate(book, ["sword"], 2) == []
    assert session.activate(book, ["sword"], 3) == []
    assert session.activate(book, ["sword"], 4) == ["sword content"]


def test_scan_depth_zero_allows_only_sticky(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword"), make_entry("shield")], scan_depth=0)
    state = ActivationState()
    state.record(EntryActivation("shield", 0, sticky_until=5))
    report = run_activation(book, ["sword shield"], 1, state)
    assert report.contents == ["shield content"]
    assert report.sticky_ids == ["shield"]


# --- inclusion groups ---

def test_inclusion_group_keeps_highest_order(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("low", keys=["storm"], inclusion_group="G", insertion_order=10),
        make_entry("high", keys=["storm"], inclusion_group="G", insertion_order=50),
    ])
    report = run_activation(book, ["a storm rolls in"], 0, ActivationState())
    assert report.contents == ["high content"]
    assert report.excluded_ids == ["low"]


def test_group_loser_gets_no_state(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("low", keys=["storm"], inclusion_group="G", insertion_order=10, cooldown=5),
        make_entry("high", keys=["storm"], inclusion_group="G", insertion_order=50),
    ])
    state = ActivationState()
    activate(book, ["storm"], 0, state)
    assert "low" not in state
    assert "high" in state


# --- ordering ---

def test_output_sorted_by_insertion_order(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("c", keys=["x"], insertion_order=30),
        make_entry("a", keys=["x"], insertion_order=10),
        make_entry("b", keys=["x"], insertion_order=20),
    ], recursive_scanning=False)
    assert activate(book, ["x"], 0, ActivationState()) == ["a content", "b content", "c content"]


def test_equal_orders_keep_lorebook_order(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("second", keys=["x"], insertion_order=10),
        make_entry("first", keys=["x"], insertion_order=10),
    ], recursive_scanning=False)
    assert activate(book, ["x"], 0, ActivationState()) == ["second content", "first content"]


def test_scan_window_respects_depth_and_direction(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword")], scan_depth=1)
    assert activate(book, ["sword", "nothing"], 0, ActivationState()) == []
    assert activate(book, ["sword", "nothing"], 0, ActivationState(), newest_first=True) == ["sword content"]


# --- recursive scanning ---

def _blade_book(make_entry, make_lorebook, recursive: bool):
    return make_lorebook([
        make_entry("A", keys=["sword"], content="a blessed blade", insertion_order=50),
        make_entry("B", keys=["blessed"], content="holy relics", insertion_order=1),
    ], recursive_scanning=recursive)


def test_recursive_scanning_pulls_in_secondary_entry(make_entry, make_lorebook):
    book = _blade_book(make_entry, make_lorebook, True)
    assert activate(book, ["I draw my sword"], 0, ActivationState()) == ["a blessed blade", "holy relics"]


def test_without_recursive_scanning_only_direct_match(make_entry, make_lorebook):
    book = _blade_book(make_entry, make_lorebook, False)
    assert activate(book, ["I draw my sword"], 0, ActivationState()) == ["a blessed blade"]


def test_recursive_entries_are_appended_not_sorted_and_not_recorded(make_entry, make_lorebook):
    book = _blade_book(make_entry, make_lorebook, True)
    state = ActivationState()
    report = run_activation(book, ["sword"], 0, state)
    assert report.resolved_ids == ["A"]
    assert report.recursive_ids == ["B"]
    assert report.entry_ids == ["A", "B"]
    assert "B" not in state


def test_recursion_ignores_cooldown(make_entry, make_lorebook, session):
    book = make_lorebook([
        make_entry("A", keys=["sword"], content="a blessed blade"),
        make_entry("B", keys=["blessed"], content="holy relics", cooldown=10),
    ])
    session.activate(book, ["blessed"], 0)
    assert session.activate(book, ["sword"], 1) == ["a blessed blade", "holy relics"]


# --- secondary filter through the orchestrator ---

def test_and_all_secondary_blocks_partial(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("s", keys=["sword"], secondary_keys=["xylophone", "yurt"], secondary_keys_logic="AND_ALL"),
    ])
    assert activate(book, ["sword and xylophone"], 0, ActivationState()) == []
    assert activate(book, ["sword, xylophone, yurt"], 0, ActivationState()) == ["s content"]


# --- sessions and reset ---

def test_reset_reallows_cooled_down_entry(make_entry, make_lorebook, session):
    book = make_lorebook([make_entry("sword", cooldown=10)])
    assert session.activate(book, ["sword"], 0) == ["sword content"]
    assert session.activate(book, ["sword"], 1) == []
    session.reset_activation_history()
    assert len(session.state) == 0
    assert session.activate(book, ["sword"], 1) == ["sword content"]


def test_sessions_do_not_share_state(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword", cooldown=10)])
    first = LorebookSession("one")
    second = LorebookSession("two")
    assert first.activate(book, ["sword"], 0) == ["sword content"]
    assert first.activate(book, ["sword"], 1) == []
    assert second.activate(book, ["sword"], 1) == ["sword content"]


def test_same_seeded_state_gives_same_result(make_entry, make_lorebook):
    book = make_lorebook([
        make_entry("a", keys=["storm"], sticky=2),
        make_entry("b", keys=["storm"], inclusion_group="G", insertion_order=5),
        make_entry("c", keys=["rain"], inclusion_group="G", insertion_order=7, cooldown=3),
        make_entry("d", keys=["fog"]),
    ])
    seed = ActivationState()
    seed.record(EntryActivation("d", 0, sticky_until=6))
    seed.record(EntryActivation("c", 1, cooldown_until=3))

    first = run_activation(book, ["storm and rain"], 2, seed.copy())
    second = run_activation(book, ["storm and rain"], 2, seed.copy())
    assert first.to_dict() == second.to_dict()
    assert first.entry_ids == ["b", "a", "d"]


def test_second_real_call_can_differ(make_entry, make_lorebook):
    book = make_lorebook([make_entry("sword", cooldown=5)])
    state = ActivationState()
    assert activate(book, ["sword"], 0, state) == ["sword content"]
    assert activate(book, ["sword"], 0, state) == []


def test_session_logs_and_reraises_shape_error(session, caplog):
    caplog.set_level(logging.ERROR)
    with pytest.raises(LorebookShapeError):
        session.activate({"id": "broken"}, ["sword"], 0)
    assert "session_id=test" in caplog.text
