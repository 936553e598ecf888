"""Real-time smart labeling of freshly synced mail."""

from __future__ import annotations

from collections.abc import Iterable

from labelq.contracts.collaborators import LabelApplier
from labelq.observability.logging import get_logger
from labelq.smart_labels.application import apply_label_pairs
from labelq.smart_labels.matcher import SmartLabelMatcher
from labelq.storage.models import LabelApplyOutcome, NormalizedMessage

logger = get_logger(__name__)


class RealtimeApplicator:
    """Runs once per sync cycle. Never raises to the sync loop."""

    def __init__(
        self,
        matcher: SmartLabelMatcher,
        applier: LabelApplier,
        *,
        max_workers: int | None = None,
    ) -> None:
        self.matcher = matcher
        self.applier = applier
        self.max_workers = max_workers

    def apply(self, account_id: str, messages: Iterable[NormalizedMessage]) -> list[LabelApplyOutcome]:
        """
        Match and label new messages.

        Side Effects:
            Applies labels via the applier. Every failure, including a rule
            fetch failure, is logged and swallowed; mail that misses its label
            here is picked up by the next sync or a backfill.

        Returns:
            Per-pair outcomes ([] if matching itself failed)
        """
        try:
            matches = self.matcher.match(account_id, messages)
            return apply_label_pairs(
                self.applier,
                account_id,
                matches,
                max_workers=self.max_workers,
                context="realtime",
            )
        except Exception:
            logger.exception("Smart label application failed for account %s", account_id)
            return []
