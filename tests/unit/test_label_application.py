"""Tests for the real-time applicator and settle-all label application."""

from unittest.mock import Mock

from labelq.observability.telemetry import get_counter
from labelq.smart_labels.application import apply_label_pairs
from labelq.smart_labels.realtime import RealtimeApplicator
from labelq.storage.models import SmartLabelMatch


def _applier(fail_on=()):
    applier = Mock()

    def add(account_id, thread_id, label_id):
        if (thread_id, label_id) in fail_on:
            raise RuntimeError(f"cannot label {thread_id}")

    applier.add_label_to_thread.side_effect = add
    return applier


MATCHES = [
    SmartLabelMatch("t1", ["L1", "L2"]),
    SmartLabelMatch("t2", ["L1"]),
]


class TestApplyLabelPairs:
    def test_applies_every_pair(self):
        applier = _applier()
        outcomes = apply_label_pairs(applier, "acct-1", MATCHES)

        assert [(o.thread_id, o.label_id, o.succeeded) for o in outcomes] == [
            ("t1", "L1", True),
            ("t1", "L2", True),
            ("t2", "L1", True),
        ]
        assert applier.add_label_to_thread.call_count == 3
        assert get_counter("smart_labels.apply_success") == 3

    def test_one_failure_does_not_abort_siblings(self):
        applier = _applier(fail_on={("t1", "L2")})
        outcomes = apply_label_pairs(applier, "acct-1", MATCHES)

        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert "cannot label t1" in outcomes[1].error
        assert get_counter("smart_labels.apply_failure") == 1
        assert get_counter("smart_labels.apply_success") == 2

    def test_no_matches(self):
        applier = _applier()
        assert apply_label_pairs(applier, "acct-1", []) == []
        applier.add_label_to_thread.assert_not_called()


class TestRealtimeApplicator:
    def test_matches_then_applies(self, make_message):
        matcher = Mock()
        matcher.match.return_value = MATCHES
        applier = _applier()
        messages = [make_message("t1"), make_message("t2")]

        outcomes = RealtimeApplicator(matcher, applier).apply("acct-1", messages)

        matcher.match.assert_called_once_with("acct-1", messages)
        assert len(outcomes) == 3
        applier.add_label_to_thread.assert_any_call("acct-1", "t2", "L1")

    def test_never_raises_on_matcher_failure(self, make_message):
        matcher = Mock()
        matcher.match.side_effect = RuntimeError("rule store unavailable")
        applier = _applier()

        assert RealtimeApplicator(matcher, applier).apply("acct-1", [make_message()]) == []
        applier.add_label_to_thread.assert_not_called()

    def test_never_raises_on_apply_failures(self, make_message):
        matcher = Mock()
        matcher.match.return_value = MATCHES
        applier = _applier(fail_on={("t1", "L1"), ("t1", "L2"), ("t2", "L1")})

        outcomes = RealtimeApplicator(matcher, applier).apply("acct-1", [make_message()])

        assert not any(o.succeeded for o in outcomes)
