"""
Deterministic filter primitives

Shared by smart labels and the plain mail filters:
- Criteria matching (from/to/subject/body substring tests, attachment flag)
- Action compiling (declarative actions -> label add/remove + flags)

Both are pure functions: no I/O, no suspension, safe to call repeatedly.
"""

from __future__ import annotations

from labelq.config import INBOX_LABEL_ID, STARRED_LABEL_ID, TRASH_LABEL_ID
from labelq.storage.models import CompiledActions, FilterActions, FilterCriteria, NormalizedMessage


# =============================================================================
# Section 1: Criteria matching
# =============================================================================


def _contains(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test. A missing haystack never matches."""
    if haystack is None:
        return False
    return needle.lower() in haystack.lower()


def _join_present(*parts: str | None) -> str | None:
    present = [p for p in parts if p is not None]
    return " ".join(present) if present else None


def matches_criteria(message: NormalizedMessage, criteria: FilterCriteria) -> bool:
    """
    Check if a message satisfies every set field of the criteria (AND logic).

    Side Effects: None (pure function)

    - from: sender display name + address
    - to: recipient address list
    - subject: subject line
    - body: text body + HTML body
    - has_attachment: requires the attachment flag (absence can't be required)

    Unset fields pass vacuously. Criteria that reference a field the message
    doesn't have fail closed.
    """
    if criteria.from_ and not _contains(
        _join_present(message.from_name, message.from_address), criteria.from_
    ):
        return False

    if criteria.to and not _contains(message.to_addresses, criteria.to):
        return False

    if criteria.subject and not _contains(message.subject, criteria.subject):
        return False

    if criteria.body and not _contains(
        _join_present(message.body_text, message.body_html), criteria.body
    ):
        return False

    return not (criteria.has_attachment and not message.has_attachments)


# =============================================================================
# Section 2: Action compiling
# =============================================================================


def _append_once(target: list[str], label_id: str) -> None:
    if label_id not in target:
        target.append(label_id)


def compile_filter_actions(actions: FilterActions) -> CompiledActions:
    """
    Compile declarative filter actions into label operations and flags.

    Side Effects: None (pure function)

    - apply_label adds that label
    - archive removes INBOX
    - trash adds TRASH and removes INBOX
    - star adds STARRED and sets the star flag
    - mark_read only sets the mark_read flag

    Archive and trash share the INBOX removal, which appears once.
    """
    compiled = CompiledActions(mark_read=actions.mark_read, star=actions.star)

    if actions.apply_label:
        _append_once(compiled.add_label_ids, actions.apply_label)

    if actions.archive:
        _append_once(compiled.remove_label_ids, INBOX_LABEL_ID)

    if actions.trash:
        _append_once(compiled.add_label_ids, TRASH_LABEL_ID)
        _append_once(compiled.remove_label_ids, INBOX_LABEL_ID)

    if actions.star:
        _append_once(compiled.add_label_ids, STARRED_LABEL_ID)

    return compiled
