"""Centralized configuration for the LabelQ smart label engine.

Re-exports everything from labelq.infrastructure.settings, then adds typed
constants for the database, LLM, label application and backfill. Environment
variable overrides use safe defaults so the engine starts without extra
configuration.
"""

from __future__ import annotations

import os

from labelq.infrastructure.settings import *  # noqa: F401, F403

# --- App ---
APP_VERSION: str = "0.1.0"

# --- Database ---
DB_POOL_SIZE: int = int(os.getenv("LABELQ_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("LABELQ_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("LABELQ_DB_CONNECT_TIMEOUT", "30.0"))
DB_TEMP_CONN_MAX: int = int(os.getenv("LABELQ_DB_TEMP_CONN_MAX", "10"))
DB_RETRY_MAX: int = int(os.getenv("LABELQ_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("LABELQ_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("LABELQ_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("LABELQ_DB_RETRY_JITTER", "0.1"))

# --- LLM ---
USE_LLM: bool = os.getenv("LABELQ_USE_LLM", "true").lower() == "true"
LLM_TIMEOUT_SECONDS: int = int(os.getenv("LABELQ_LLM_TIMEOUT", "30"))
LLM_MAX_RETRIES: int = int(os.getenv("LABELQ_LLM_MAX_RETRIES", "3"))
LLM_MAX_OUTPUT_TOKENS: int = int(os.getenv("LABELQ_LLM_MAX_OUTPUT_TOKENS", "2048"))
LLM_TEMPERATURE: float = 0.1

# --- Prompt truncation ---
PROMPT_SUBJECT_MAX_CHARS: int = 200
PROMPT_SENDER_MAX_CHARS: int = 100
PROMPT_SNIPPET_MAX_CHARS: int = 500
PROMPT_DESCRIPTION_MAX_CHARS: int = 500

# --- Label application ---
LABEL_APPLY_MAX_WORKERS: int = int(os.getenv("LABELQ_APPLY_MAX_WORKERS", "8"))

# --- Backfill ---
BACKFILL_BATCH_SIZE: int = 50
BACKFILL_BATCH_SIZE_MAX: int = 500

# --- System labels ---
INBOX_LABEL_ID: str = "INBOX"
TRASH_LABEL_ID: str = "TRASH"
STARRED_LABEL_ID: str = "STARRED"
