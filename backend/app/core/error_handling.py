"""Error handling utilities: lorebook exceptions, structured logging and error responses."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LorebookError(Exception):
    """Base class for lorebook errors surfaced to callers."""


class LorebookShapeError(LorebookError):
    """A lorebook value is structurally invalid (e.g. no entries collection)."""


class LorebookLoadError(LorebookError):
    """A lorebook document could not be read or decoded."""

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


def log_error_with_context(
    error: Exception,
    stage: str,
    lorebook_id: str | None = None,
    turn_index: int | None = None,
    session_id: str | None = None,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """
    Log an error with full context: lorebook id, turn index, session and stack trace.

    Args:
        error: The exception that occurred
        stage: Where it happened (e.g., 'activate', 'load', 'import')
        lorebook_id: Lorebook ID for context
        turn_index: Turn index for context
        session_id: Conversation session for context
        extra_context: Additional context dict to include in log
    """
    context_parts = []
    if lorebook_id:
        context_parts.append(f"lorebook_id={lorebook_id}")
    if turn_index is not None:
        context_parts.append(f"turn_index={turn_index}")
    if session_id:
        context_parts.append(f"session_id={session_id}")
    context_str = ", ".join(context_parts) if context_parts else "no context"

    extra = {}
    if extra_context:
        extra.update(extra_context)
    if lorebook_id:
        extra["lorebook_id"] = lorebook_id
    if turn_index is not None:
        extra["turn_index"] = turn_index
    if session_id:
        extra["session_id"] = session_id
    extra["stage"] = stage

    logger.error(
        f"[{stage}] Error: {type(error).__name__}: {str(error)} ({context_str})",
        exc_info=True,
        extra=extra,
    )


def create_error_response(
    error_code: str,
    message: str,
    stage: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a structured error response for callers that report errors as data.

    Args:
        error_code: Error code (e.g., 'LOREBOOK_NOT_FOUND', 'LOREBOOK_INVALID')
        message: Human-readable error message
        stage: Where the error occurred
        details: Additional error details

    Returns:
        Structured error dict
    """
    response: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
    }
    if stage:
        response["stage"] = stage
    if details:
        response["details"] = details
    return response
