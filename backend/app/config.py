"""Engine config: recursion bound, regex handling, env overrides.

Env overrides: LOREBOOK_MAX_RECURSION_DEPTH, LOREBOOK_LOG_INVALID_REGEX,
LOREBOOK_REGEX_CACHE_SIZE.
"""
from __future__ import annotations

import logging

from shared.config import (
    LOREBOOK_DATA_DIR,
    LOREKEEPER_LOG_LEVEL,
    _env_flag,
    _env_int,
)

logger = logging.getLogger(__name__)


def _recursion_depth() -> int:
    depth = _env_int("LOREBOOK_MAX_RECURSION_DEPTH", 3)
    if depth < 0:
        logger.warning("LOREBOOK_MAX_RECURSION_DEPTH=%s is negative; using 0", depth)
        return 0
    return depth


# Recursive scanning stops after this many rounds even if new entries keep appearing
MAX_RECURSION_DEPTH = _recursion_depth()

# Malformed regex keys are always skipped; this only controls the warning
LOG_INVALID_REGEX = _env_flag("LOREBOOK_LOG_INVALID_REGEX", default=True)

# Compiled pattern memo size (patterns are keyed by source + flags)
REGEX_CACHE_SIZE = max(_env_int("LOREBOOK_REGEX_CACHE_SIZE", 512), 1)


def effective_config() -> dict[str, object]:
    """Return the resolved configuration for display (CLI `config`)."""
    return {
        "LOREBOOK_DATA_DIR": LOREBOOK_DATA_DIR,
        "LOREKEEPER_LOG_LEVEL": LOREKEEPER_LOG_LEVEL,
        "MAX_RECURSION_DEPTH": MAX_RECURSION_DEPTH,
        "LOG_INVALID_REGEX": LOG_INVALID_REGEX,
        "REGEX_CACHE_SIZE": REGEX_CACHE_SIZE,
    }
