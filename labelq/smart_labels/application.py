"""
Settle-all label application

Every (thread, label) pair is applied concurrently and reports its own
outcome. A failed pair is logged with its ids so it can be retried by hand;
it never cancels or hides its siblings.
"""

from __future__ import annotations

from collections.abc import Iterable

from labelq import config
from labelq.contracts.collaborators import LabelApplier
from labelq.observability.logging import get_logger
from labelq.observability.telemetry import counter
from labelq.storage.models import LabelApplyOutcome, SmartLabelMatch
from labelq.utils.concurrency import settle_all

logger = get_logger(__name__)


def apply_label_pairs(
    applier: LabelApplier,
    account_id: str,
    matches: Iterable[SmartLabelMatch],
    *,
    max_workers: int | None = None,
    context: str = "smart_labels",
) -> list[LabelApplyOutcome]:
    """
    Apply every label of every match.

    Side Effects:
        Calls applier.add_label_to_thread once per pair, concurrently.
        Increments apply_success/apply_failure counters.

    Returns:
        One outcome per pair, in the order pairs appear in `matches`
    """
    pairs = [(match.thread_id, label_id) for match in matches for label_id in match.label_ids]
    if not pairs:
        return []

    settled = settle_all(
        [
            lambda thread_id=thread_id, label_id=label_id: applier.add_label_to_thread(
                account_id, thread_id, label_id
            )
            for thread_id, label_id in pairs
        ],
        max_workers=max_workers or config.LABEL_APPLY_MAX_WORKERS,
    )

    outcomes: list[LabelApplyOutcome] = []
    for (thread_id, label_id), result in zip(pairs, settled):
        if result.ok:
            outcomes.append(LabelApplyOutcome(thread_id, label_id, succeeded=True))
            continue

        logger.error(
            "[%s] Failed to apply smart label %s to thread %s (account %s): %s",
            context,
            label_id,
            thread_id,
            account_id,
            result.error,
        )
        outcomes.append(
            LabelApplyOutcome(thread_id, label_id, succeeded=False, error=str(result.error))
        )

    succeeded = sum(1 for o in outcomes if o.succeeded)
    if succeeded:
        counter("smart_labels.apply_success", succeeded)
    if succeeded < len(outcomes):
        counter("smart_labels.apply_failure", len(outcomes) - succeeded)

    return outcomes
