"""
Thread Label Repository - local thread/label mirror.

Default InboxThreadSource (paged inbox scan for backfill) and default
LabelApplier (idempotent insert into thread_labels).
"""

from __future__ import annotations

from labelq.config import INBOX_LABEL_ID
from labelq.infrastructure.database import retry_on_db_lock
from labelq.observability.logging import get_logger
from labelq.storage import BaseRepository
from labelq.storage.models import InboxThreadRow

logger = get_logger(__name__)


class ThreadLabelRepository(BaseRepository):
    """Reads inbox threads and writes thread labels for one database."""

    def __init__(self) -> None:
        super().__init__("thread_labels")

    def fetch_inbox_thread_batch(
        self, account_id: str, limit: int, offset: int
    ) -> list[InboxThreadRow]:
        """
        Inbox threads for an account, newest first, each joined with its
        latest message.

        Side Effects: None (read-only query)
        """
        rows = self.query_all(
            """
            SELECT t.id AS thread_id, t.subject, t.snippet,
                   m.id AS message_id, m.from_address, m.from_name,
                   m.to_addresses, m.body_text, m.body_html,
                   COALESCE(m.has_attachments, 0) AS has_attachments
            FROM threads t
            INNER JOIN thread_labels tl
                ON tl.account_id = t.account_id AND tl.thread_id = t.id
            LEFT JOIN messages m
                ON m.account_id = t.account_id AND m.thread_id = t.id
               AND m.id = (
                   SELECT m2.id FROM messages m2
                   WHERE m2.account_id = t.account_id AND m2.thread_id = t.id
                   ORDER BY m2.date DESC, m2.id DESC
                   LIMIT 1
               )
            WHERE t.account_id = ? AND tl.label_id = ?
            ORDER BY t.last_message_at DESC, t.id
            LIMIT ? OFFSET ?
            """,
            (account_id, INBOX_LABEL_ID, limit, offset),
        )
        return [InboxThreadRow.from_db_row(dict(row)) for row in rows]

    @retry_on_db_lock()
    def add_label_to_thread(self, account_id: str, thread_id: str, label_id: str) -> None:
        """
        Apply a label to a thread. Re-applying an existing label is a no-op.

        Side Effects:
            - Inserts into thread_labels (INSERT OR IGNORE)
        """
        inserted = self.execute(
            """
            INSERT OR IGNORE INTO thread_labels (account_id, thread_id, label_id)
            VALUES (?, ?, ?)
            """,
            (account_id, thread_id, label_id),
        )
        if inserted:
            logger.debug("Labeled thread %s with %s", thread_id, label_id)

    def labels_for_thread(self, account_id: str, thread_id: str) -> list[str]:
        rows = self.query_all(
            """
            SELECT label_id FROM thread_labels
            WHERE account_id = ? AND thread_id = ?
            ORDER BY label_id
            """,
            (account_id, thread_id),
        )
        return [row["label_id"] for row in rows]
