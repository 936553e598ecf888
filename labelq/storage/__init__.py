"""Storage - models and SQLite repositories"""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from labelq.infrastructure.database import db_transaction, get_db_connection


class BaseRepository:
    """Base class for database repositories with common query helpers."""

    def __init__(self, table_name: str) -> None:
        if not isinstance(table_name, str) or not table_name.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {table_name}")
        self.table_name = table_name

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        with get_db_connection() as conn:
            yield conn

    def query_one(self, query: str, params: tuple[Any, ...] | None = None) -> sqlite3.Row | None:
        with self._get_conn() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return cursor.fetchone()

    def query_all(self, query: str, params: tuple[Any, ...] | None = None) -> list[sqlite3.Row]:
        with self._get_conn() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return cursor.fetchall()

    def execute(self, query: str, params: tuple[Any, ...] | None = None) -> int:
        """
        Execute a write query (INSERT, UPDATE, DELETE)

        Returns:
            Number of rows affected

        Side Effects:
            - Writes to the database and commits (rolls back on error)
        """
        with db_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return cursor.rowcount


__all__ = ["BaseRepository"]
