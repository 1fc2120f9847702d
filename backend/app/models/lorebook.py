"""Pydantic models for lorebooks (world info).

Documents are stored with camelCase keys (``insertionOrder``, ``scanDepth``);
Python code may populate the models by field name as well. Unknown keys are
ignored so documents written by newer editors still load.
"""
from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from backend.app.constants import (
    DEFAULT_GROUP_WEIGHT,
    DEFAULT_INSERTION_ORDER,
    DEFAULT_RECURSIVE_SCANNING,
    DEFAULT_SCAN_DEPTH,
)

SecondaryKeysLogic = Literal["AND_ANY", "AND_ALL", "NOT_ANY", "NOT_ALL"]
BudgetPriority = Literal["order", "activation"]

_ID_ALPHABET = string.digits + string.ascii_lowercase


class _DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LorebookEntry(_DocumentModel):
    """A single triggerable knowledge snippet with its own matching and timing rules."""

    id: str
    title: str = ""
    keys: List[str] = Field(default_factory=list)
    content: str = ""
    enabled: bool = True
    # Lower values are inserted first; higher values sit closer to the live turn
    insertion_order: int
    memo: Optional[str] = None

    case_sensitive: bool = False
    use_regex: bool = False

    secondary_keys: List[str] = Field(default_factory=list)
    secondary_keys_logic: Optional[SecondaryKeysLogic] = None

    # Counted in messages; None and 0 both mean "off"
    sticky: Optional[int] = Field(default=None, ge=0)
    cooldown: Optional[int] = Field(default=None, ge=0)
    delay: Optional[int] = Field(default=None, ge=0)

    inclusion_group: Optional[str] = None
    group_weight: int = DEFAULT_GROUP_WEIGHT

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("keys", "secondary_keys", mode="before")
    @classmethod
    def _coerce_key_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("keys")
    @classmethod
    def _dedupe_keys(cls, v: List[str]) -> List[str]:
        seen: set[str] = set()
        out: List[str] = []
        for key in v:
            if key in seen:
                continue
            seen.add(key)
            out.append(key)
        return out

    @field_validator("inclusion_group")
    @classmethod
    def _blank_group_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _enabled_needs_keys(self) -> "LorebookEntry":
        if self.enabled and not any(k for k in self.keys):
            raise ValueError(f"entry '{self.id}' is enabled but has no keys")
        return self

    @property
    def has_secondary_filter(self) -> bool:
        return bool(self.secondary_keys) and self.secondary_keys_logic is not None


class Lorebook(_DocumentModel):
    """An ordered collection of entries plus scan configuration."""

    id: str
    name: str = ""
    description: Optional[str] = None
    entries: List[LorebookEntry]

    # How many trailing messages form the matching window (0 = sticky/recursive only)
    scan_depth: int = Field(default=DEFAULT_SCAN_DEPTH, ge=0)
    recursive_scanning: bool = DEFAULT_RECURSIVE_SCANNING

    # Carried for editors; the activation engine does not enforce budgets
    budget_enabled: bool = False
    budget_cap: Optional[int] = Field(default=None, ge=0)
    budget_priority: Optional[BudgetPriority] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("scan_depth", mode="before")
    @classmethod
    def _null_scan_depth(cls, v):
        return DEFAULT_SCAN_DEPTH if v is None else v

    @field_validator("recursive_scanning", mode="before")
    @classmethod
    def _null_recursive(cls, v):
        return DEFAULT_RECURSIVE_SCANNING if v is None else v

    @model_validator(mode="after")
    def _unique_entry_ids(self) -> "Lorebook":
        seen: set[str] = set()
        dupes: list[str] = []
        for entry in self.entries:
            if entry.id in seen and entry.id not in dupes:
                dupes.append(entry.id)
            seen.add(entry.id)
        if dupes:
            raise ValueError(f"duplicate entry ids: {', '.join(dupes)}")
        return self

    def get_entry(self, entry_id: str) -> LorebookEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_default_lorebook(worldline_id: str, worldline_name: str) -> Lorebook:
    """Empty lorebook for a worldline with the stock scan settings."""
    now = _now_iso()
    return Lorebook(
        id=f"lorebook_{worldline_id}",
        name=f"{worldline_name} - Lorebook",
        description="World background knowledge base",
        entries=[],
        scan_depth=DEFAULT_SCAN_DEPTH,
        recursive_scanning=True,
        budget_enabled=False,
        created_at=now,
        updated_at=now,
    )


def create_entry(title: str, keys: list[str], content: str) -> LorebookEntry:
    """New enabled, literal, case-insensitive entry at the default insertion order."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    now = _now_iso()
    return LorebookEntry(
        id=f"entry_{int(time.time() * 1000)}_{suffix}",
        title=title,
        keys=keys,
        content=content,
        enabled=True,
        insertion_order=DEFAULT_INSERTION_ORDER,
        case_sensitive=False,
        use_regex=False,
        created_at=now,
        updated_at=now,
    )
