"""``lorekeeper activate``: run one activation against a lorebook with a fresh session."""
from __future__ import annotations

import json
from pathlib import Path

from backend.app.core.error_handling import LorebookError, create_error_response
from backend.app.core.lore_injection import format_lore_injection
from backend.app.core.lorebook_engine import LorebookSession
from backend.app.world.lorebook_loader import load_lorebook


def register(subparsers) -> None:
    p = subparsers.add_parser("activate", help="Show which entries a conversation activates")
    p.add_argument("lorebook", help="Lorebook file, or a name under LOREBOOK_DATA_DIR")
    p.add_argument("--message", "-m", action="append", default=[], help="Message text (repeatable, oldest first)")
    p.add_argument("--messages-file", type=str, help="Text file with one message per line (oldest first)")
    p.add_argument("--turn", type=int, default=0, help="Current turn index (default: 0)")
    p.add_argument("--newest-first", action="store_true", help="Messages are given newest first")
    p.add_argument("--framed", action="store_true", help="Print the framed prompt block")
    p.add_argument("--json", action="store_true", help="Print the activation report as JSON")
    p.set_defaults(func=run)


def _read_messages(args) -> list[str]:
    messages = list(args.message or [])
    if args.messages_file:
        text = Path(args.messages_file).read_text(encoding="utf-8")
        messages.extend(line for line in text.splitlines() if line.strip())
    return messages


def run(args) -> int:
    try:
        messages = _read_messages(args)
    except OSError as e:
        print(f"  ERROR: could not read messages: {e}")
        return 1

    try:
        book = load_lorebook(args.lorebook)
        report = LorebookSession(session_id="cli").run(
            book, messages, args.turn, newest_first=args.newest_first,
        )
    except LorebookError as e:
        if args.json:
            print(json.dumps(create_error_response("LOREBOOK_INVALID", str(e), stage="activate")))
        else:
            print(f"  ERROR: {e}")
        return 1
    except ValueError as e:
        print(f"  ERROR: {e}")
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    elif args.framed:
        print(format_lore_injection(report.contents))
    else:
        if not report.contents:
            print("No entries activated.")
        for entry_id, content in zip(report.entry_ids, report.contents):
            print(f"[{entry_id}] {content}")
    return 0
