"""Lorebook document loading and saving (JSON or YAML)."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from backend.app.core.error_handling import LorebookLoadError, LorebookShapeError
from backend.app.models.lorebook import Lorebook
from shared.config import LOREBOOK_DATA_DIR

logger = logging.getLogger(__name__)

_EXTENSIONS = (".json", ".yaml", ".yml")


def parse_lorebook(data: Any) -> Lorebook:
    """Validate a decoded document into a Lorebook."""
    if not isinstance(data, dict):
        raise LorebookShapeError(f"lorebook document must be an object, got {type(data).__name__}")
    if data.get("entries") is None:
        raise LorebookShapeError("lorebook document has no 'entries' collection")
    try:
        return Lorebook.model_validate(data)
    except ValidationError as e:
        raise LorebookShapeError(f"invalid lorebook document: {e}") from e


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def resolve_lorebook_path(name_or_path: str | Path) -> Path:
    """Existing path as given, else a bare name looked up under LOREBOOK_DATA_DIR."""
    p = Path(name_or_path)
    if p.exists():
        return p
    if p.suffix or p.parent != Path("."):
        return p
    base = Path(LOREBOOK_DATA_DIR)
    for ext in _EXTENSIONS:
        candidate = base / f"{p.name}{ext}"
        if candidate.exists():
            return candidate
    return p


def load_lorebook(path: str | Path) -> Lorebook:
    """Load and validate a lorebook from a .json, .yaml or .yml file."""
    p = resolve_lorebook_path(path)
    if not p.is_file():
        raise LorebookLoadError(f"lorebook not found: {p}", path=p)
    try:
        data = _read_document(p)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise LorebookLoadError(f"could not read lorebook {p}: {e}", path=p) from e
    book = parse_lorebook(data)
    logger.info("Loaded lorebook %s (%d entries) from %s", book.id, len(book.entries), p)
    return book


def dump_lorebook(lorebook: Lorebook) -> dict[str, Any]:
    """camelCase document form, omitting unset optional fields."""
    return lorebook.model_dump(by_alias=True, exclude_none=True)


def save_lorebook(lorebook: Lorebook, path: str | Path) -> Path:
    """Write the lorebook as camelCase JSON (YAML when the suffix asks for it)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    doc = dump_lorebook(lorebook)
    if p.suffix.lower() in (".yaml", ".yml"):
        p.write_text(yaml.safe_dump(doc, allow_unicode=True, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved lorebook %s to %s", lorebook.id, p)
    return p
