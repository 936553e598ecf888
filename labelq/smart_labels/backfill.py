"""
Smart label backfill

Re-applies the current rules over an account's whole inbox, one page of
threads at a time. Pages run strictly one after another so each page makes
at most one classification call; only label application within a page is
concurrent.

Restart is always from offset 0. Label application is idempotent, so a
re-run only repeats work.
"""

from __future__ import annotations

from labelq import config
from labelq.contracts.collaborators import InboxThreadSource, LabelApplier
from labelq.observability.logging import get_logger
from labelq.observability.telemetry import counter, log_event, time_block
from labelq.smart_labels.application import apply_label_pairs
from labelq.smart_labels.matcher import SmartLabelMatcher

logger = get_logger(__name__)


class BackfillProcessor:
    """Paginated re-application of smart label rules."""

    def __init__(
        self,
        matcher: SmartLabelMatcher,
        applier: LabelApplier,
        thread_source: InboxThreadSource,
        *,
        max_workers: int | None = None,
    ) -> None:
        self.matcher = matcher
        self.applier = applier
        self.thread_source = thread_source
        self.max_workers = max_workers

    def backfill(self, account_id: str, batch_size: int = config.BACKFILL_BATCH_SIZE) -> int:
        """
        Run smart labels over every inbox thread of the account.

        Side Effects:
            Reads thread pages, makes one classification call per page, and
            applies labels. Page fetch and rule fetch failures propagate;
            per-pair application failures are logged and skipped.

        Returns:
            Total label ids across all matches (includes pairs whose
            application failed)

        Raises:
            ValueError: If batch_size < 1
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        total = 0
        offset = 0
        batches = 0

        with time_block("smart_labels.backfill.latency"):
            while True:
                rows = self.thread_source.fetch_inbox_thread_batch(account_id, batch_size, offset)
                if not rows:
                    break

                batches += 1
                counter("smart_labels.backfill_batch")
                messages = [row.to_message() for row in rows]
                matches = self.matcher.match(account_id, messages)
                apply_label_pairs(
                    self.applier,
                    account_id,
                    matches,
                    max_workers=self.max_workers,
                    context="backfill",
                )

                applied = sum(len(match.label_ids) for match in matches)
                total += applied
                logger.debug(
                    "Backfill batch %d for account %s: %d threads, %d labels",
                    batches,
                    account_id,
                    len(rows),
                    applied,
                )

                offset += batch_size
                if len(rows) < batch_size:
                    break

        log_event(
            "smart_labels.backfill.complete",
            account_id=account_id,
            batches=batches,
            labels_applied=total,
        )
        return total
