"""Lorekeeper: keyword-triggered lorebook activation for AI tabletop sessions."""
