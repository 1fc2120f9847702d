"""Entry point for ``python -m lorekeeper <command>``.

Commands:
    validate    - load a lorebook and report problems
    activate    - run one activation against a lorebook
    import-docs - build a lorebook from a folder of setting documents
    config      - show resolved configuration
"""
from lorekeeper.cli import main

if __name__ == "__main__":
    main()
