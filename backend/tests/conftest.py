"""Pytest setup: project root on sys.path and small lorebook builders."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[2]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from backend.app.models.lorebook import Lorebook, LorebookEntry  # noqa: E402


def build_entry(entry_id: str, keys: list[str] | None = None, **kwargs) -> LorebookEntry:
    """Enabled entry with content '<id> content' unless overridden."""
    data = {
        "id": entry_id,
        "title": entry_id,
        "keys": keys if keys is not None else [entry_id],
        "content": f"{entry_id} content",
        "insertion_order": 100,
    }
    data.update(kwargs)
    return LorebookEntry(**data)


def build_lorebook(entries: list[LorebookEntry], **kwargs) -> Lorebook:
    data = {"id": "book", "name": "Test Book", "entries": entries}
    data.update(kwargs)
    return Lorebook(**data)


@pytest.fixture
def make_entry():
    return build_entry


@pytest.fixture
def make_lorebook():
    return build_lorebook
