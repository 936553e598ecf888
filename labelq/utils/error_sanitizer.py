"""
Error message sanitization for HTTP responses.

Internal details (paths, SQL, credentials, module names) never reach
clients; the full error is logged instead.
"""

from __future__ import annotations

import re

from labelq.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.py",
    r"[A-Za-z]:\\[^\s]+",
    # Stack traces
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # Database errors
    r"sqlite3?\.",
    r"constraint failed",
    r"no such table",
    r"no such column",
    r"database is locked",
    # Credentials
    r"[A-Za-z0-9_-]{20,}",
    r"Bearer [A-Za-z0-9._-]+",
    # Internal module names
    r"labelq\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    404: "Resource not found.",
    422: "Invalid data format.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Return `message` if it is a short, harmless client error, else a generic one.

    Only 4xx messages are ever passed through.
    """
    generic = GENERIC_MESSAGES.get(status_code, "An error occurred.")
    if not message:
        return generic

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return generic

    if (
        400 <= status_code < 500
        and len(message) < 100
        and not any(c in message for c in ["{", "}", "[", "]", "\n"])
    ):
        return message

    return generic


def get_safe_error_detail(error: Exception, status_code: int = 500, context: str | None = None) -> str:
    """
    Log the full error and return a detail string safe for clients.

    For 5xx errors `context` (e.g. "Backfill failed") replaces the message.
    """
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, error)

    if context and status_code >= 500:
        return context
    return sanitize_error_message(str(error), status_code)
