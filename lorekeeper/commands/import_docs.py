"""``lorekeeper import-docs``: build a lorebook from a folder of setting documents."""
from __future__ import annotations

from pathlib import Path

from backend.app.world.document_import import collect_documents, convert_documents_to_lorebook
from backend.app.world.lorebook_loader import save_lorebook


def register(subparsers) -> None:
    p = subparsers.add_parser("import-docs", help="Convert markdown/text documents into a lorebook")
    p.add_argument("input", help="Directory of .md/.markdown/.txt documents")
    p.add_argument("--name", type=str, required=True, help="Lorebook name")
    p.add_argument("--out", type=str, required=True, help="Output file (.json, .yaml or .yml)")
    p.set_defaults(func=run)


def run(args) -> int:
    src = Path(args.input)
    if not src.is_dir():
        print(f"  ERROR: input directory not found: {src}")
        return 1

    docs = collect_documents(src)
    if not docs:
        print(f"  ERROR: no .md/.markdown/.txt documents under {src}")
        return 1

    book = convert_documents_to_lorebook(docs, args.name)
    out = save_lorebook(book, args.out)
    print(f"Imported {len(docs)} documents into {len(book.entries)} entries -> {out}")
    return 0
