"""Environment-backed settings for external services (Gemini, database path)."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# --- Gemini / Vertex AI ---
GEMINI_MODEL: str = os.getenv("LABELQ_GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_LOCATION: str = os.getenv("LABELQ_GEMINI_LOCATION", "us-central1")
# GOOGLE_CLOUD_PROJECT and GOOGLE_API_KEY are read per call (see labelq.llm.gemini)

# --- Runtime ---
LABELQ_ENV: str = os.getenv("LABELQ_ENV", "development")
