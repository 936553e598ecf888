"""
Database schema initialization for LabelQ.

Holds the SQL schema for smart label rules and the local thread/label mirror
used by backfill and the default label applier.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from labelq.observability.logging import get_logger

logger = get_logger(__name__)


def init_database(db_path: Path) -> None:
    """
    Initialize database with schema (idempotent)

    Safe to run multiple times - uses CREATE TABLE IF NOT EXISTS.

    Side Effects:
    - Creates the parent directory if needed
    - Creates tables and indexes if they don't exist
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)

    conn.executescript("""
        CREATE TABLE IF NOT EXISTS smart_label_rules (
            id TEXT PRIMARY KEY,
            account_id TEXT NOT NULL,
            label_id TEXT NOT NULL,
            ai_description TEXT NOT NULL,
            criteria_json TEXT,
            is_enabled INTEGER NOT NULL DEFAULT 1,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_smart_label_rules_account
        ON smart_label_rules(account_id, is_enabled, sort_order);

        CREATE TABLE IF NOT EXISTS threads (
            account_id TEXT NOT NULL,
            id TEXT NOT NULL,
            subject TEXT,
            snippet TEXT,
            last_message_at INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (account_id, id)
        );

        CREATE INDEX IF NOT EXISTS idx_threads_account_recency
        ON threads(account_id, last_message_at DESC);

        CREATE TABLE IF NOT EXISTS messages (
            account_id TEXT NOT NULL,
            id TEXT NOT NULL,
            thread_id TEXT NOT NULL,
            from_address TEXT,
            from_name TEXT,
            to_addresses TEXT,
            subject TEXT,
            snippet TEXT,
            body_text TEXT,
            body_html TEXT,
            has_attachments INTEGER NOT NULL DEFAULT 0,
            date INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (account_id, id)
        );

        CREATE INDEX IF NOT EXISTS idx_messages_thread_date
        ON messages(account_id, thread_id, date);

        CREATE TABLE IF NOT EXISTS thread_labels (
            account_id TEXT NOT NULL,
            thread_id TEXT NOT NULL,
            label_id TEXT NOT NULL,
            PRIMARY KEY (account_id, thread_id, label_id)
        );

        CREATE INDEX IF NOT EXISTS idx_thread_labels_label
        ON thread_labels(account_id, label_id);
    """)

    conn.commit()
    conn.close()

    logger.info("Database initialized: %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Validate database has expected schema

    Raises:
        ValueError: If tables or columns are missing
    """
    required_tables = {
        "smart_label_rules": ["id", "account_id", "label_id", "ai_description", "criteria_json", "is_enabled"],
        "threads": ["account_id", "id", "subject", "snippet", "last_message_at"],
        "messages": ["account_id", "id", "thread_id", "from_address", "has_attachments", "date"],
        "thread_labels": ["account_id", "thread_id", "label_id"],
    }

    cursor = conn.cursor()

    cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    existing_tables = {row[0] for row in cursor.fetchall()}

    missing_tables = set(required_tables.keys()) - existing_tables
    if missing_tables:
        raise ValueError(f"Database missing tables: {missing_tables}")

    for table, required_cols in required_tables.items():
        # Identifiers can't be parameterized; names come from the dict above
        cursor.execute(f"PRAGMA table_info({table})")
        existing_cols = {row[1] for row in cursor.fetchall()}

        missing_cols = set(required_cols) - existing_cols
        if missing_cols:
            raise ValueError(f"Table '{table}' missing columns: {missing_cols}")

    return True
