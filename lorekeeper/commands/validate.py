"""``lorekeeper validate``: load a lorebook and report problems."""
from __future__ import annotations

from backend.app.core.error_handling import LorebookError
from backend.app.core.lore_matcher import compile_key
from backend.app.models.lorebook import Lorebook
from backend.app.world.lorebook_loader import load_lorebook


def register(subparsers) -> None:
    p = subparsers.add_parser("validate", help="Load a lorebook and report problems")
    p.add_argument("lorebook", help="Lorebook file, or a name under LOREBOOK_DATA_DIR")
    p.add_argument("--strict", action="store_true", help="Exit 1 when warnings are found")
    p.set_defaults(func=run)


def collect_warnings(book: Lorebook) -> list[str]:
    """Configuration defects the engine would silently tolerate."""
    warnings: list[str] = []
    for entry in book.entries:
        if not entry.enabled:
            continue
        if entry.use_regex:
            for key in entry.keys:
                pattern, err = compile_key(key, entry.case_sensitive)
                if pattern is None:
                    warnings.append(f"{entry.id}: invalid regex {key!r} ({err})")
        if entry.secondary_keys and entry.secondary_keys_logic is None:
            warnings.append(f"{entry.id}: secondary keys set without secondaryKeysLogic (ignored)")
    if book.budget_enabled:
        warnings.append("budgetEnabled is set but budgets are not enforced by activation")
    return warnings


def run(args) -> int:
    try:
        book = load_lorebook(args.lorebook)
    except LorebookError as e:
        print(f"  ERROR: {e}")
        return 1

    enabled = sum(1 for e in book.entries if e.enabled)
    groups = {e.inclusion_group for e in book.entries if e.inclusion_group}
    print(f"Lorebook {book.id} ({book.name or 'unnamed'})")
    print(f"  entries: {len(book.entries)} ({enabled} enabled)")
    print(f"  inclusion groups: {len(groups)}")
    print(f"  scan depth: {book.scan_depth}, recursive scanning: {book.recursive_scanning}")

    warnings = collect_warnings(book)
    for w in warnings:
        print(f"  [WARN] {w}")
    if not warnings:
        print("  [OK]   no problems found")
    return 1 if warnings and args.strict else 0
