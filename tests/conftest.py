"""
Pytest configuration for LabelQ tests

Shared fixtures: message/rule factories, in-memory telemetry reset, and a
temporary SQLite database for integration tests.
"""

from __future__ import annotations

import itertools

import pytest

from labelq.observability.telemetry import reset_counters, reset_latencies
from labelq.storage.models import FilterCriteria, NormalizedMessage, SmartLabelRule


@pytest.fixture(autouse=True)
def _reset_telemetry():
    reset_counters()
    reset_latencies()
    yield


@pytest.fixture
def make_message():
    """Factory for NormalizedMessage with sensible defaults."""
    ids = itertools.count(1)

    def _make(thread_id: str = "t1", **overrides) -> NormalizedMessage:
        fields = {
            "id": f"m{next(ids)}",
            "thread_id": thread_id,
            "from_address": "someone@example.com",
            "from_name": "Someone",
            "to_addresses": "me@example.com",
            "subject": "Hello",
            "snippet": "Just saying hi",
            "body_text": "Just saying hi",
        }
        fields.update(overrides)
        return NormalizedMessage(**fields)

    return _make


@pytest.fixture
def make_rule():
    """Factory for SmartLabelRule. `criteria` may be a dict in stored form."""
    ids = itertools.count(1)

    def _make(
        label_id: str = "L1",
        ai_description: str = "Messages from the boss",
        criteria: dict | FilterCriteria | None = None,
        **overrides,
    ) -> SmartLabelRule:
        if isinstance(criteria, dict):
            criteria = FilterCriteria.model_validate(criteria)
        fields = {
            "id": f"rule-{next(ids)}",
            "account_id": "acct-1",
            "label_id": label_id,
            "ai_description": ai_description,
            "criteria": criteria,
        }
        fields.update(overrides)
        return SmartLabelRule(**fields)

    return _make


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point LABELQ_DB_PATH at a fresh database with the full schema."""
    from labelq.infrastructure.database import init_database, reset_pool

    db_path = tmp_path / "labelq.db"
    monkeypatch.setenv("LABELQ_DB_PATH", str(db_path))
    reset_pool()
    init_database()

    yield db_path

    reset_pool()


@pytest.fixture
def seed_threads(temp_db):
    """Insert inbox threads (each with one message) directly into the temp DB."""
    from labelq.infrastructure.database import db_transaction

    def _seed(account_id: str, threads: list[dict]) -> None:
        with db_transaction() as conn:
            for t in threads:
                conn.execute(
                    "INSERT INTO threads (account_id, id, subject, snippet, last_message_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (account_id, t["id"], t.get("subject"), t.get("snippet"), t.get("last_message_at", 0)),
                )
                conn.execute(
                    "INSERT INTO messages (account_id, id, thread_id, from_address, from_name, "
                    "to_addresses, subject, snippet, body_text, has_attachments, date) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        account_id,
                        f"{t['id']}-m1",
                        t["id"],
                        t.get("from_address"),
                        t.get("from_name"),
                        t.get("to_addresses"),
                        t.get("subject"),
                        t.get("snippet"),
                        t.get("body_text"),
                        int(t.get("has_attachments", False)),
                        t.get("last_message_at", 0),
                    ),
                )
                if t.get("inbox", True):
                    conn.execute(
                        "INSERT INTO thread_labels (account_id, thread_id, label_id) VALUES (?, ?, 'INBOX')",
                        (account_id, t["id"]),
                    )

    return _seed
