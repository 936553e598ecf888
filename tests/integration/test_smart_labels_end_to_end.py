"""End-to-end smart labels over SQLite with a fake classification gateway."""

from unittest.mock import Mock

from labelq.smart_labels.service import (
    SmartLabelService,
    apply_smart_labels_to_messages,
    backfill_smart_labels,
    match_smart_labels,
)
from labelq.storage.models import FilterCriteria
from labelq.storage.smart_label_rules import SmartLabelRuleRepository
from labelq.storage.threads import ThreadLabelRepository


def _service(classify_result=None, classify_error=None):
    gateway = Mock()
    gateway.classify.return_value = classify_result or {}
    if classify_error is not None:
        gateway.classify.side_effect = classify_error
    return SmartLabelService(gateway=gateway), gateway


def test_boss_scenario(temp_db, make_message):
    SmartLabelRuleRepository().create(
        "acct-1", "L1", "Messages from the boss", criteria=FilterCriteria(from_="boss")
    )
    service, gateway = _service()
    messages = [
        make_message("t1", from_address="boss@co.com", subject="Q1 plan"),
        make_message("t2", from_address="noreply@shop.com", subject="Sale"),
    ]

    matches = match_smart_labels("acct-1", messages, service=service)

    assert [(m.thread_id, m.label_ids) for m in matches] == [("t1", ["L1"])]
    candidates, _ = gateway.classify.call_args.args
    assert [c.thread_id for c in candidates] == ["t2"]


def test_classification_only_scenario(temp_db, make_message):
    SmartLabelRuleRepository().create("acct-1", "L1", "Messages from the boss")
    service, _ = _service({"t1": ["L1", "UNKNOWN_LABEL"]})
    messages = [
        make_message("t1", from_address="boss@co.com", subject="Q1 plan"),
        make_message("t2", from_address="noreply@shop.com", subject="Sale"),
    ]

    matches = match_smart_labels("acct-1", messages, service=service)

    assert [(m.thread_id, m.label_ids) for m in matches] == [("t1", ["L1"])]


def test_realtime_applies_labels(seed_threads, make_message):
    seed_threads("acct-1", [{"id": "t1"}, {"id": "t2"}])
    SmartLabelRuleRepository().create(
        "acct-1", "L1", "Messages from the boss", criteria=FilterCriteria(from_="boss")
    )
    service, _ = _service(classify_error=TimeoutError("slow"))

    apply_smart_labels_to_messages(
        "acct-1",
        [make_message("t1", from_address="boss@co.com"), make_message("t2")],
        service=service,
    )

    threads = ThreadLabelRepository()
    assert threads.labels_for_thread("acct-1", "t1") == ["INBOX", "L1"]
    assert threads.labels_for_thread("acct-1", "t2") == ["INBOX"]


def test_backfill_labels_inbox(seed_threads):
    seed_threads(
        "acct-1",
        [
            {
                "id": f"t{i}",
                "subject": f"Invoice {i}" if i % 2 == 0 else f"Hello {i}",
                "from_address": "billing@vendor.com",
                "last_message_at": i,
            }
            for i in range(5)
        ],
    )
    SmartLabelRuleRepository().create(
        "acct-1", "Invoices", "Invoices and bills", criteria=FilterCriteria(subject="invoice")
    )
    service, gateway = _service({"t1": ["Invoices"]})

    total = backfill_smart_labels("acct-1", batch_size=2, service=service)

    # t0, t2, t4 by criteria; t1 by classification (it is in the second batch)
    assert total == 4
    # The last batch (t0) is fully matched by criteria and makes no call
    assert gateway.classify.call_count == 2
    threads = ThreadLabelRepository()
    labeled = [f"t{i}" for i in range(5) if "Invoices" in threads.labels_for_thread("acct-1", f"t{i}")]
    assert labeled == ["t0", "t1", "t2", "t4"]


def test_backfill_without_rules(seed_threads):
    seed_threads("acct-1", [{"id": "t1"}])
    service, gateway = _service()

    assert backfill_smart_labels("acct-1", service=service) == 0
    gateway.classify.assert_not_called()
