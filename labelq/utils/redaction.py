"""
Redaction helpers for logs and prompts.

Provides:
- redact(): Hash sensitive strings for correlation without exposure
- sanitize_for_prompt(): Remove potential prompt injection patterns
"""

from __future__ import annotations

import re
from hashlib import sha256

INJECTION_PATTERNS = [
    r"ignore\s+(previous|above|all)\s+instructions?",
    r"disregard\s+(previous|above|all)\s+instructions?",
    r"forget\s+(previous|above|all)\s+instructions?",
    r"new\s+instructions?:",
    r"system\s*:",
    r"assistant\s*:",
    r"user\s*:",
    r"\[INST\]",
    r"\[/INST\]",
    r"<\|im_start\|>",
    r"<\|im_end\|>",
]
INJECTION_REGEX = re.compile("|".join(INJECTION_PATTERNS), re.IGNORECASE)


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def sanitize_for_prompt(text: str | None, max_length: int = 500) -> str:
    """
    Sanitize user-provided text before including it in an LLM prompt.

    Truncates, strips known injection patterns, and removes characters used
    as delimiters in the smart label prompt (angle brackets, braces, pipes).
    Newlines are collapsed so one thread stays on one prompt line.
    """
    if not text:
        return ""

    text = text[:max_length]
    text = INJECTION_REGEX.sub("[REDACTED]", text)
    text = re.sub(r"[<>{}|\\]", "", text)
    text = re.sub(r"\s+", " ", text)

    return text.strip()
