"""
Collaborator Protocols for the smart label engine

The engine depends on these interfaces only. The SQLite repositories and the
Gemini gateway in this package are the default implementations; callers may
pass anything that satisfies the protocol (a Gmail-backed applier, a fake
gateway in tests, ...).
"""

from __future__ import annotations

from typing import Protocol

from labelq.storage.models import (
    InboxThreadRow,
    LabelDefinition,
    SmartLabelRule,
    ThreadCandidate,
)


class RuleStore(Protocol):
    """Source of the enabled smart label rules for an account."""

    def get_enabled_rules(self, account_id: str) -> list[SmartLabelRule]:
        """Return only enabled rules; disabled rules must be invisible.

        Side Effects:
            Reads rule storage. Failures propagate to the caller.
        """
        ...


class ClassificationGateway(Protocol):
    """Best-effort natural-language classifier of threads into labels."""

    def classify(
        self,
        candidates: list[ThreadCandidate],
        label_defs: list[LabelDefinition],
    ) -> dict[str, list[str]]:
        """Map thread ids to the label ids that apply.

        May raise, and may return ids it was never given. Callers validate
        the response; the gateway does not.

        Side Effects:
            One external model call.
        """
        ...


class LabelApplier(Protocol):
    """Idempotent add-label-to-thread primitive."""

    def add_label_to_thread(self, account_id: str, thread_id: str, label_id: str) -> None:
        """Apply a label. Applying an already-present label is a no-op.

        Raises on failure; each call fails independently of its siblings.
        """
        ...


class InboxThreadSource(Protocol):
    """Paged read of an account's inbox threads, newest first."""

    def fetch_inbox_thread_batch(
        self, account_id: str, limit: int, offset: int
    ) -> list[InboxThreadRow]:
        """Return up to `limit` inbox threads starting at `offset`.

        Side Effects:
            Reads thread storage. Failures propagate to the caller.
        """
        ...
