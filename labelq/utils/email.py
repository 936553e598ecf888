"""
Address helpers for LabelQ.
"""

from __future__ import annotations

import re


def extract_email_address(email_address: str | None) -> str:
    """
    Extract and normalize an email address from common header formats.

    Examples:
        >>> extract_email_address("user@example.com")
        'user@example.com'

        >>> extract_email_address("John Doe <john@company.com>")
        'john@company.com'

        >>> extract_email_address("invalid")
        'invalid'
    """
    if not email_address:
        return ""

    email_lower = email_address.lower().strip()

    angle_match = re.search(r"<([^>]+)>", email_lower)
    if angle_match:
        email_lower = angle_match.group(1).strip()

    return email_lower
