"""``lorekeeper config``: show effective configuration after env overrides."""
from __future__ import annotations

from backend.app.config import effective_config


def register(subparsers) -> None:
    p = subparsers.add_parser("config", help="Show effective configuration")
    p.set_defaults(func=run)


def run(args) -> int:
    print("Effective lorekeeper config (after env overrides):")
    print()
    for key, value in effective_config().items():
        print(f"- {key}: {value}")

    print("\nOverride with environment variables, e.g.:")
    print("  LOREBOOK_MAX_RECURSION_DEPTH=5")
    print("  LOREBOOK_DATA_DIR=/path/to/lorebooks")
    return 0
