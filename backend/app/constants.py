"""Centralized lorebook constants shared across the app."""
from __future__ import annotations

# Lorebook defaults applied when a document omits the field
DEFAULT_SCAN_DEPTH = 10
DEFAULT_RECURSIVE_SCANNING = True
DEFAULT_GROUP_WEIGHT = 100

# Only used by create_entry(); parsed entries must carry their own insertionOrder
DEFAULT_INSERTION_ORDER = 100

# Secondary key filter logic
SECONDARY_LOGIC_AND_ANY = "AND_ANY"
SECONDARY_LOGIC_AND_ALL = "AND_ALL"
SECONDARY_LOGIC_NOT_ANY = "NOT_ANY"
SECONDARY_LOGIC_NOT_ALL = "NOT_ALL"

SECONDARY_KEYS_LOGICS = frozenset({
    SECONDARY_LOGIC_AND_ANY,
    SECONDARY_LOGIC_AND_ALL,
    SECONDARY_LOGIC_NOT_ANY,
    SECONDARY_LOGIC_NOT_ALL,
})

# Setting-document import limits
IMPORT_MIN_PARAGRAPH_CHARS = 50
IMPORT_MAX_PARAGRAPHS_PER_DOCUMENT = 10
IMPORT_MAX_CONTENT_CHARS = 500
IMPORT_MAX_KEYWORDS = 5
IMPORT_MAX_TAGS = 3
IMPORT_MAX_TAG_CHARS = 20
IMPORT_FIRST_INSERTION_ORDER = 100
