"""Setting-document import: turn a folder of markdown/text notes into lorebook entries.

Each document is split into paragraphs; every paragraph long enough to carry
knowledge becomes one entry whose keys are the first few words of the
paragraph. Editors refine the keys afterwards.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Literal

from pydantic import BaseModel, Field

from backend.app.constants import (
    IMPORT_FIRST_INSERTION_ORDER,
    IMPORT_MAX_CONTENT_CHARS,
    IMPORT_MAX_KEYWORDS,
    IMPORT_MAX_PARAGRAPHS_PER_DOCUMENT,
    IMPORT_MAX_TAG_CHARS,
    IMPORT_MAX_TAGS,
    IMPORT_MIN_PARAGRAPH_CHARS,
)
from backend.app.models.lorebook import Lorebook, create_default_lorebook, create_entry

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = frozenset({".md", ".markdown", ".txt"})
IMPORTED_CATEGORY = "Imported settings"

_HEADING_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_MARKUP_RE = re.compile(r"[#*_`\[\]()]")
_WORD_SPLIT_RE = re.compile(r"[\s,，。.!！?？；;：:、]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
_TITLE_SUFFIX_RE = re.compile(r"\.(md|markdown|txt)$", re.IGNORECASE)


class SettingDocument(BaseModel):
    title: str
    content: str
    format: Literal["markdown", "plaintext"] = "plaintext"
    category: str | None = None
    tags: List[str] = Field(default_factory=list)


def extract_tags(content: str) -> list[str]:
    """First few top-level markdown headings, short ones only."""
    tags: list[str] = []
    for heading in _HEADING_RE.findall(content)[:IMPORT_MAX_TAGS]:
        tag = heading.strip()
        if 0 < len(tag) < IMPORT_MAX_TAG_CHARS:
            tags.append(tag)
    return tags


def extract_keywords(paragraph: str) -> list[str]:
    """Leading words of a paragraph (markup stripped, 2-14 chars), deduplicated."""
    clean = re.sub(r"\s+", " ", _MARKUP_RE.sub("", paragraph)).strip()
    words = [w for w in _WORD_SPLIT_RE.split(clean) if 1 < len(w) < 15]
    # dict.fromkeys keeps first-seen order
    return list(dict.fromkeys(words[:IMPORT_MAX_KEYWORDS]))


def document_from_file(path: str | Path) -> SettingDocument | None:
    p = Path(path)
    content = p.read_text(encoding="utf-8")
    if not content:
        return None
    return SettingDocument(
        title=_TITLE_SUFFIX_RE.sub("", p.name),
        content=content,
        format="markdown" if p.suffix.lower() in (".md", ".markdown") else "plaintext",
        category=IMPORTED_CATEGORY,
        tags=extract_tags(content),
    )


def collect_documents(root: str | Path) -> list[SettingDocument]:
    """All markdown/text documents under root, in sorted path order."""
    base = Path(root)
    if not base.is_dir():
        raise NotADirectoryError(f"not a directory: {base}")
    docs: list[SettingDocument] = []
    for p in sorted(base.rglob("*")):
        if not p.is_file() or p.suffix.lower() not in DOCUMENT_SUFFIXES:
            continue
        doc = document_from_file(p)
        if doc is not None:
            docs.append(doc)
    logger.info("Collected %d setting documents from %s", len(docs), base)
    return docs


def _paragraphs(content: str) -> list[str]:
    parts = (p.strip() for p in _PARAGRAPH_SPLIT_RE.split(content))
    return [p for p in parts if len(p) > IMPORT_MIN_PARAGRAPH_CHARS]


def convert_documents_to_lorebook(
    documents: Iterable[SettingDocument],
    lorebook_name: str,
    *,
    worldline_id: str | None = None,
) -> Lorebook:
    """Build a lorebook with one entry per usable paragraph."""
    lorebook = create_default_lorebook(worldline_id or _slug(lorebook_name), lorebook_name)
    insertion_order = IMPORT_FIRST_INSERTION_ORDER

    for doc in documents:
        for para in _paragraphs(doc.content)[:IMPORT_MAX_PARAGRAPHS_PER_DOCUMENT]:
            keys = extract_keywords(para)
            if not keys:
                continue
            entry = create_entry(f"{doc.title} - excerpt", keys, para[:IMPORT_MAX_CONTENT_CHARS])
            entry.insertion_order = insertion_order
            entry.memo = f"Source: {doc.title}"
            insertion_order += 1
            lorebook.entries.append(entry)

    logger.info("Converted documents into %d lorebook entries", len(lorebook.entries))
    return lorebook


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", (name or "").strip().lower()).strip("_") or "imported"
