"""Keyword matching for lorebook entries.

Pure functions over a text window and one entry: primary keys (literal or
regex), the optional secondary-key filter, and the scan-window builder.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Sequence

from backend.app.config import LOG_INVALID_REGEX, REGEX_CACHE_SIZE
from backend.app.constants import (
    SECONDARY_LOGIC_AND_ALL,
    SECONDARY_LOGIC_AND_ANY,
    SECONDARY_LOGIC_NOT_ALL,
    SECONDARY_LOGIC_NOT_ANY,
)
from backend.app.models.lorebook import LorebookEntry

logger = logging.getLogger(__name__)


def build_scan_window(
    messages: Sequence[str] | None,
    scan_depth: int,
    *,
    newest_first: bool = False,
) -> str:
    """Join the last ``scan_depth`` messages into one searchable string.

    Messages are chronological by default, so the trailing ones are used.
    With ``newest_first`` the leading ones are used instead.
    """
    if not messages or scan_depth <= 0:
        return ""
    picked = list(messages[:scan_depth]) if newest_first else list(messages[-scan_depth:])
    return " ".join(m for m in picked if m)


@lru_cache(maxsize=REGEX_CACHE_SIZE)
def _compile(pattern: str, flags: int) -> tuple[re.Pattern[str] | None, str | None]:
    try:
        return re.compile(pattern, flags), None
    except re.error as e:
        return None, str(e)


def compile_key(key: str, case_sensitive: bool) -> tuple[re.Pattern[str] | None, str | None]:
    """Compile a regex key; returns (pattern, None) or (None, error message)."""
    return _compile(key, 0 if case_sensitive else re.IGNORECASE)


def _literal_found(text: str, key: str, case_sensitive: bool) -> bool:
    if not key:
        return False
    if case_sensitive:
        return key in text
    return key.lower() in text.lower()


def matches_keys(text: str, keys: Sequence[str], entry: LorebookEntry) -> bool:
    """True if ANY key occurs in text, honouring the entry's case and regex flags."""
    if not text:
        return False
    for key in keys:
        if not key:
            continue
        if entry.use_regex:
            pattern, err = compile_key(key, entry.case_sensitive)
            if pattern is None:
                if LOG_INVALID_REGEX:
                    logger.warning("Invalid regex in lorebook entry %s: %r (%s)", entry.id, key, err)
                continue
            if pattern.search(text):
                return True
        elif _literal_found(text, key, entry.case_sensitive):
            return True
    return False


def passes_secondary_filter(text: str, entry: LorebookEntry) -> bool:
    """Apply the entry's secondary-key logic; entries without one always pass."""
    if not entry.has_secondary_filter:
        return True

    total = len(entry.secondary_keys)
    found = sum(1 for key in entry.secondary_keys if _literal_found(text, key, entry.case_sensitive))
    logic = entry.secondary_keys_logic

    if logic == SECONDARY_LOGIC_AND_ANY:
        return found > 0
    if logic == SECONDARY_LOGIC_AND_ALL:
        return found == total
    if logic == SECONDARY_LOGIC_NOT_ANY:
        return found == 0
    if logic == SECONDARY_LOGIC_NOT_ALL:
        return found < total
    return True


def entry_matches(text: str, entry: LorebookEntry) -> bool:
    """Full trigger check for one entry: enabled, primary keys, then secondary filter."""
    if not entry.enabled:
        return False
    if not matches_keys(text, entry.keys, entry):
        return False
    return passes_secondary_filter(text, entry)
