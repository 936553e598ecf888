"""
Two-phase smart label matching

Phase 1 (deterministic): every rule with criteria is checked against each
thread's representative message. Free, instant, and authoritative.

Phase 2 (AI fallback): threads that still have at least one rule label not
satisfied in Phase 1 are sent to the classification gateway together with
every enabled rule's description. The response is validated against the ids
actually sent; anything else is dropped. If the gateway fails, Phase 1
results stand on their own.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from labelq.classification.filters import matches_criteria
from labelq.contracts.collaborators import ClassificationGateway, RuleStore
from labelq.observability.logging import get_logger
from labelq.observability.telemetry import counter, time_block
from labelq.storage.models import (
    LabelDefinition,
    NormalizedMessage,
    SmartLabelMatch,
    SmartLabelRule,
    ThreadCandidate,
)
from labelq.utils.email import extract_email_address

logger = get_logger(__name__)

Pair = tuple[str, str]


def representative_messages(messages: Iterable[NormalizedMessage]) -> dict[str, NormalizedMessage]:
    """
    Pick one message per thread: the first one seen.

    Later messages of an already-seen thread are ignored for this pass. The
    returned dict keeps first-seen thread order.
    """
    threads: dict[str, NormalizedMessage] = {}
    for message in messages:
        if message.thread_id not in threads:
            threads[message.thread_id] = message
    return threads


class SmartLabelMatcher:
    """Decides which rule labels apply to which threads."""

    def __init__(self, rule_store: RuleStore, gateway: ClassificationGateway) -> None:
        self.rule_store = rule_store
        self.gateway = gateway

    def match(self, account_id: str, messages: Iterable[NormalizedMessage]) -> list[SmartLabelMatch]:
        """
        Run one matching pass over `messages`.

        Side Effects:
            Reads rules (failures propagate) and makes at most one
            classification call (failures are logged and absorbed).
            Never applies labels.
        """
        rules = self.rule_store.get_enabled_rules(account_id)
        if not rules:
            return []

        threads = representative_messages(messages)
        if not threads:
            return []

        # Insertion-ordered "sets" so results are stable across runs
        matched: dict[str, dict[str, None]] = {}
        satisfied = self._match_criteria(rules, threads, matched)

        rule_label_ids = {rule.label_id for rule in rules}
        candidates = [
            ThreadCandidate(
                thread_id=thread_id,
                subject=message.subject or "",
                snippet=message.snippet or "",
                sender_address=extract_email_address(message.from_address),
            )
            for thread_id, message in threads.items()
            if any((thread_id, label_id) not in satisfied for label_id in rule_label_ids)
        ]

        if candidates:
            label_defs = [LabelDefinition(rule.label_id, rule.ai_description) for rule in rules]
            for thread_id, label_id in self._classify(candidates, label_defs, rule_label_ids):
                if (thread_id, label_id) in satisfied:
                    continue
                matched.setdefault(thread_id, {})[label_id] = None

        return [
            SmartLabelMatch(thread_id=thread_id, label_ids=list(label_ids))
            for thread_id, label_ids in matched.items()
            if label_ids
        ]

    def _match_criteria(
        self,
        rules: list[SmartLabelRule],
        threads: Mapping[str, NormalizedMessage],
        matched: dict[str, dict[str, None]],
    ) -> set[Pair]:
        """Phase 1. Fills `matched` and returns the satisfied (thread, label) pairs."""
        satisfied: set[Pair] = set()
        criteria_rules = [r for r in rules if r.criteria is not None and not r.criteria.is_empty()]

        for thread_id, message in threads.items():
            for rule in criteria_rules:
                if matches_criteria(message, rule.criteria):
                    matched.setdefault(thread_id, {})[rule.label_id] = None
                    satisfied.add((thread_id, rule.label_id))

        if satisfied:
            counter("smart_labels.criteria_match", len(satisfied))
        return satisfied

    def _classify(
        self,
        candidates: list[ThreadCandidate],
        label_defs: list[LabelDefinition],
        rule_label_ids: set[str],
    ) -> list[Pair]:
        """
        Phase 2. Returns validated (thread, label) pairs, or [] on any failure.

        Validation happens before anything is merged, so a response that
        blows up half-way contributes nothing.
        """
        counter("smart_labels.ai_call")
        candidate_ids = {c.thread_id for c in candidates}

        try:
            with time_block("smart_labels.ai_call.latency"):
                response = self.gateway.classify(candidates, label_defs)
            pairs, dropped = _validate_assignments(response, candidate_ids, rule_label_ids)
        except Exception as e:
            counter("smart_labels.ai_error")
            logger.warning(
                "Smart label AI classification failed for %d threads, using criteria matches only: %s",
                len(candidates),
                e,
            )
            return []

        if dropped:
            counter("smart_labels.ai_dropped_pairs", dropped)
            logger.debug("Dropped %d classification pairs with unknown ids", dropped)
        return pairs


def _validate_assignments(
    response: Any, candidate_ids: set[str], rule_label_ids: set[str]
) -> tuple[list[Pair], int]:
    """
    Keep only pairs whose thread id was sent and whose label id is a rule label.

    Returns (pairs, dropped_count). A response that isn't a mapping at all is
    malformed and raises.
    """
    if not isinstance(response, Mapping):
        raise TypeError(f"classification response must be a mapping, got {type(response).__name__}")

    pairs: list[Pair] = []
    dropped = 0
    for thread_id, label_ids in response.items():
        if isinstance(label_ids, str) or not isinstance(label_ids, Iterable):
            dropped += 1
            continue
        for label_id in label_ids:
            if thread_id in candidate_ids and isinstance(label_id, str) and label_id in rule_label_ids:
                pairs.append((thread_id, label_id))
            else:
                dropped += 1
    return pairs, dropped
