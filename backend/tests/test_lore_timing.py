"""Tests for the temporal gate: delay, cooldown and sticky windows."""
from __future__ import annotations

from backend.app.core.lore_timing import (
    is_cooling_down,
    is_delayed,
    is_sticky,
    record_activation,
)
from backend.app.models.activation import ActivationState


def test_delay_blocks_until_turn(make_entry):
    entry = make_entry("late", delay=3)
    assert is_delayed(entry, 0)
    assert is_delayed(entry, 2)
    assert not is_delayed(entry, 3)


def test_zero_or_unset_delay_never_blocks(make_entry):
    assert not is_delayed(make_entry("a", delay=0), 0)
    assert not is_delayed(make_entry("b"), 0)


def test_record_activation_sets_both_windows(make_entry):
    state = ActivationState()
    entry = make_entry("both", sticky=2, cooldown=4)
    rec = record_activation(state, entry, 5)
    assert rec.last_activated_at == 5
    assert rec.sticky_until == 7
    assert rec.cooldown_until == 9
    assert state.get("both") == rec


def test_record_activation_without_timing(make_entry):
    state = ActivationState()
    rec = record_activation(state, make_entry("plain"), 3)
    assert rec.sticky_until is None
    assert rec.cooldown_until is None


def test_sticky_window_is_half_open(make_entry):
    state = ActivationState()
    entry = make_entry("s", sticky=2)
    record_activation(state, entry, 5)
    assert is_sticky(state, entry, 5)
    assert is_sticky(state, entry, 6)
    assert not is_sticky(state, entry, 7)


def test_cooldown_window_is_half_open(make_entry):
    state = ActivationState()
    entry = make_entry("c", cooldown=3)
    record_activation(state, entry, 1)
    assert is_cooling_down(state, entry, 1)
    assert is_cooling_down(state, entry, 3)
    assert not is_cooling_down(state, entry, 4)


def test_no_state_means_no_windows(make_entry):
    state = ActivationState()
    entry = make_entry("fresh", sticky=5, cooldown=5)
    assert not is_sticky(state, entry, 0)
    assert not is_cooling_down(state, entry, 0)


def test_reactivation_overwrites_record(make_entry):
    state = ActivationState()
    entry = make_entry("s", sticky=2)
    record_activation(state, entry, 0)
    record_activation(state, entry, 4)
    assert state.get("s").sticky_until == 6
    assert len(state) == 1
