"""Tests for criteria matching and action compiling."""

import pytest

from labelq.classification.filters import compile_filter_actions, matches_criteria
from labelq.storage.models import FilterActions, FilterCriteria


class TestMatchesCriteria:
    def test_empty_criteria_matches_everything(self, make_message):
        msg = make_message(from_address=None, from_name=None, to_addresses=None, subject=None)
        assert matches_criteria(msg, FilterCriteria())

    @pytest.mark.parametrize(
        ("criteria", "expected"),
        [
            ({"from": "BOSS"}, True),
            ({"from": "Big Boss"}, True),
            ({"from": "intern"}, False),
            ({"to": "team@co.com"}, True),
            ({"subject": "q1 PLAN"}, True),
            ({"subject": "q2"}, False),
            ({"body": "<b>budget</b>"}, True),
            ({"body": "deadline friday"}, True),
        ],
    )
    def test_single_field_is_case_insensitive_substring(self, make_message, criteria, expected):
        msg = make_message(
            from_address="boss@co.com",
            from_name="Big Boss",
            to_addresses="me@co.com, team@co.com",
            subject="Q1 Plan",
            body_text="Deadline Friday",
            body_html="<p><b>Budget</b></p>",
        )
        assert matches_criteria(msg, FilterCriteria.model_validate(criteria)) is expected

    def test_from_matches_display_name_and_address(self, make_message):
        msg = make_message(from_address="ceo@co.com", from_name="Alice Boss")
        assert matches_criteria(msg, FilterCriteria(from_="alice"))
        assert matches_criteria(msg, FilterCriteria(from_="ceo@"))

    def test_multiple_fields_are_anded(self, make_message):
        msg = make_message(from_address="boss@co.com", subject="Sale")
        assert not matches_criteria(msg, FilterCriteria(from_="boss", subject="Q1"))
        assert matches_criteria(msg, FilterCriteria(from_="boss", subject="sale"))

    @pytest.mark.parametrize(
        ("field", "criteria"),
        [
            ("from", {"from": "boss"}),
            ("to", {"to": "me"}),
            ("subject", {"subject": "hello"}),
            ("body", {"body": "hi"}),
        ],
    )
    def test_missing_message_field_fails_closed(self, make_message, field, criteria):
        overrides = {
            "from": {"from_address": None, "from_name": None},
            "to": {"to_addresses": None},
            "subject": {"subject": None},
            "body": {"body_text": None, "body_html": None},
        }[field]
        msg = make_message(**overrides)
        assert matches_criteria(msg, FilterCriteria.model_validate(criteria)) is False

    def test_has_attachment_requires_flag(self, make_message):
        criteria = FilterCriteria(has_attachment=True)
        assert matches_criteria(make_message(has_attachments=True), criteria)
        assert not matches_criteria(make_message(has_attachments=False), criteria)

    def test_has_attachment_false_does_not_require_absence(self, make_message):
        criteria = FilterCriteria(subject="hello", has_attachment=False)
        assert matches_criteria(make_message(has_attachments=True), criteria)


class TestCompileFilterActions:
    def test_apply_label(self):
        compiled = compile_filter_actions(FilterActions(apply_label="Label_7"))
        assert compiled.add_label_ids == ["Label_7"]
        assert compiled.remove_label_ids == []

    def test_archive_removes_inbox(self):
        compiled = compile_filter_actions(FilterActions(archive=True))
        assert compiled.remove_label_ids == ["INBOX"]
        assert compiled.add_label_ids == []

    @pytest.mark.parametrize(
        "extra",
        [{}, {"archive": True}, {"star": True, "markRead": True}, {"applyLabel": "L1", "archive": True}],
    )
    def test_trash_always_adds_trash_and_removes_inbox(self, extra):
        compiled = compile_filter_actions(FilterActions.model_validate({"trash": True, **extra}))
        assert "TRASH" in compiled.add_label_ids
        assert compiled.remove_label_ids == ["INBOX"]

    def test_star_adds_starred_and_sets_flag(self):
        compiled = compile_filter_actions(FilterActions(star=True))
        assert compiled.add_label_ids == ["STARRED"]
        assert compiled.star is True

    def test_mark_read_is_flag_only(self):
        compiled = compile_filter_actions(FilterActions.model_validate({"markRead": True}))
        assert compiled.mark_read is True
        assert compiled.add_label_ids == []
        assert compiled.remove_label_ids == []

    def test_no_label_both_added_and_removed(self):
        compiled = compile_filter_actions(
            FilterActions(apply_label="L1", archive=True, trash=True, star=True, mark_read=True)
        )
        assert not set(compiled.add_label_ids) & set(compiled.remove_label_ids)
