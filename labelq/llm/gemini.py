"""
Gemini model handles.

A handle is built from explicit credentials each time a caller needs one; a
credential change simply means building a new handle. Nothing is cached at
module level.

Supports two backends:
  1. Vertex AI SDK (production) - GOOGLE_CLOUD_PROJECT + service account
  2. google-generativeai (local dev) - GOOGLE_API_KEY
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from labelq.config import GEMINI_LOCATION, GEMINI_MODEL
from labelq.observability.logging import get_logger

logger = get_logger(__name__)


class GeminiInitializationError(RuntimeError):
    """Raised when a Gemini model cannot be initialized."""


@dataclass(frozen=True)
class GeminiCredentials:
    """Everything needed to build a model handle."""

    model_name: str = GEMINI_MODEL
    project: str | None = None
    location: str = GEMINI_LOCATION
    api_key: str | None = None

    @classmethod
    def from_env(cls) -> GeminiCredentials:
        """Read credentials from the environment at call time."""
        return cls(
            model_name=os.getenv("LABELQ_GEMINI_MODEL", GEMINI_MODEL),
            project=os.getenv("GOOGLE_CLOUD_PROJECT") or None,
            location=os.getenv("LABELQ_GEMINI_LOCATION", GEMINI_LOCATION),
            api_key=os.getenv("GOOGLE_API_KEY") or None,
        )

    @property
    def configured(self) -> bool:
        return bool(self.project or self.api_key)


@dataclass(frozen=True)
class GeminiHandle:
    """A ready-to-call model bound to the credentials it was built from."""

    credentials: GeminiCredentials
    model: Any
    backend: str

    def generate_text(self, prompt: str, *, temperature: float, max_output_tokens: int) -> str:
        """
        Run one completion and return its text.

        Side Effects:
            Makes an HTTP request to the Gemini API.
        """
        response = self.model.generate_content(
            prompt,
            generation_config={
                "temperature": temperature,
                "top_p": 0.8,
                "max_output_tokens": max_output_tokens,
            },
        )
        return response.text


def create_gemini_handle(credentials: GeminiCredentials) -> GeminiHandle:
    """
    Build a Gemini model handle for the given credentials.

    Uses Vertex AI when a project is configured, otherwise google-generativeai
    with an API key.

    Raises:
        GeminiInitializationError: If credentials are missing or the SDK fails
    """
    if credentials.project:
        try:
            import vertexai
            from vertexai.generative_models import GenerativeModel

            vertexai.init(project=credentials.project, location=credentials.location)
            model = GenerativeModel(credentials.model_name)
        except Exception as e:
            logger.error("Failed to initialize Gemini model (Vertex AI): %s", e)
            raise GeminiInitializationError(f"Failed to initialize Vertex AI: {e}") from e

        logger.debug(
            "Initialized Gemini model (Vertex AI): project=%s, location=%s, model=%s",
            credentials.project,
            credentials.location,
            credentials.model_name,
        )
        return GeminiHandle(credentials=credentials, model=model, backend="vertexai")

    if credentials.api_key:
        try:
            import google.generativeai as genai

            genai.configure(api_key=credentials.api_key)
            model = genai.GenerativeModel(credentials.model_name)
        except Exception as e:
            logger.error("Failed to initialize Gemini model (google-generativeai): %s", e)
            raise GeminiInitializationError(f"Failed to initialize Gemini: {e}") from e

        logger.debug("Initialized Gemini model (google-generativeai): model=%s", credentials.model_name)
        return GeminiHandle(credentials=credentials, model=model, backend="generativeai")

    raise GeminiInitializationError(
        "No Gemini credentials: set GOOGLE_CLOUD_PROJECT (Vertex AI) or GOOGLE_API_KEY."
    )
