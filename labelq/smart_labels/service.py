"""
Smart label entry points

SmartLabelService wires the matcher, real-time applicator and backfill
processor to one set of collaborators. The module-level functions are the
surface the sync and settings code call; they use the SQLite repositories and
the Gemini gateway unless collaborators are passed in.
"""

from __future__ import annotations

from collections.abc import Iterable

from labelq import config
from labelq.classification.smart_label_gateway import GeminiSmartLabelGateway
from labelq.contracts.collaborators import (
    ClassificationGateway,
    InboxThreadSource,
    LabelApplier,
    RuleStore,
)
from labelq.smart_labels.backfill import BackfillProcessor
from labelq.smart_labels.matcher import SmartLabelMatcher
from labelq.smart_labels.realtime import RealtimeApplicator
from labelq.storage.models import NormalizedMessage, SmartLabelMatch
from labelq.storage.smart_label_rules import SmartLabelRuleRepository
from labelq.storage.threads import ThreadLabelRepository


class SmartLabelService:
    """One engine instance bound to its collaborators."""

    def __init__(
        self,
        rule_store: RuleStore | None = None,
        gateway: ClassificationGateway | None = None,
        applier: LabelApplier | None = None,
        thread_source: InboxThreadSource | None = None,
    ) -> None:
        threads = ThreadLabelRepository() if applier is None or thread_source is None else None

        self.matcher = SmartLabelMatcher(
            rule_store or SmartLabelRuleRepository(),
            gateway or GeminiSmartLabelGateway(),
        )
        self.realtime = RealtimeApplicator(self.matcher, applier or threads)
        self.backfill_processor = BackfillProcessor(
            self.matcher, applier or threads, thread_source or threads
        )

    def match(self, account_id: str, messages: Iterable[NormalizedMessage]) -> list[SmartLabelMatch]:
        return self.matcher.match(account_id, messages)

    def apply(self, account_id: str, messages: Iterable[NormalizedMessage]) -> None:
        self.realtime.apply(account_id, messages)

    def backfill(self, account_id: str, batch_size: int = config.BACKFILL_BATCH_SIZE) -> int:
        return self.backfill_processor.backfill(account_id, batch_size)


def match_smart_labels(
    account_id: str,
    messages: Iterable[NormalizedMessage],
    *,
    service: SmartLabelService | None = None,
) -> list[SmartLabelMatch]:
    """
    Decide which smart labels apply to the given messages' threads.

    Side Effects:
        At most one classification call. No labels are applied.
    """
    return (service or SmartLabelService()).match(account_id, messages)


def apply_smart_labels_to_messages(
    account_id: str,
    messages: Iterable[NormalizedMessage],
    *,
    service: SmartLabelService | None = None,
) -> None:
    """
    Label newly synced messages. Never raises.

    Side Effects:
        Applies labels; failures are logged only.
    """
    (service or SmartLabelService()).apply(account_id, messages)


def backfill_smart_labels(
    account_id: str,
    batch_size: int = config.BACKFILL_BATCH_SIZE,
    *,
    service: SmartLabelService | None = None,
) -> int:
    """
    Re-apply smart labels across the account's inbox.

    Returns:
        Number of label ids matched across all batches
    """
    return (service or SmartLabelService()).backfill(account_id, batch_size)
