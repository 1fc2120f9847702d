"""Core lorebook engine: matching, temporal gate, inclusion groups, recursion and orchestration."""
