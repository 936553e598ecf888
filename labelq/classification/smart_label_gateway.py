"""
Gemini-backed smart label classification

Sends candidate threads and every enabled label description to Gemini in one
prompt and parses the returned thread -> label ids mapping.

The gateway returns whatever ids the model produced. Filtering unknown thread
or label ids is the matcher's job.
"""

from __future__ import annotations

import concurrent.futures
import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from labelq import config
from labelq.llm.errors import AiError, AiErrorCode, classify_ai_exception
from labelq.llm.gemini import (
    GeminiCredentials,
    GeminiHandle,
    GeminiInitializationError,
    create_gemini_handle,
)
from labelq.llm.prompts import get_smart_label_prompt
from labelq.observability.logging import get_logger
from labelq.storage.models import LabelDefinition, ThreadCandidate
from labelq.utils.redaction import sanitize_for_prompt

logger = get_logger(__name__)


class SmartLabelResponse(BaseModel):
    """Expected JSON shape of the model's answer."""

    model_config = ConfigDict(extra="ignore")

    # Values stay loose: odd entries are dropped per pair by the matcher,
    # not by rejecting the whole response
    assignments: dict[str, Any]


def build_smart_label_prompt(
    candidates: list[ThreadCandidate], label_defs: list[LabelDefinition]
) -> str:
    """
    Render the classification prompt with sanitized, truncated inputs.

    Side Effects: None (pure function)
    """
    label_lines = "\n".join(
        f"LABEL_ID:{d.label_id} — "
        f"{sanitize_for_prompt(d.description, config.PROMPT_DESCRIPTION_MAX_CHARS)}"
        for d in label_defs
    )
    thread_lines = "\n".join(
        f"ID:{c.thread_id}"
        f" | From:{sanitize_for_prompt(c.sender_address, config.PROMPT_SENDER_MAX_CHARS)}"
        f" | Subject:{sanitize_for_prompt(c.subject, config.PROMPT_SUBJECT_MAX_CHARS)}"
        f" | {sanitize_for_prompt(c.snippet, config.PROMPT_SNIPPET_MAX_CHARS)}"
        for c in candidates
    )
    return get_smart_label_prompt(label_definitions=label_lines, threads=thread_lines)


def _strip_code_fences(text: str) -> str:
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if "```" in text:
        return text.split("```")[1].split("```")[0].strip()
    return text


def _parse_line_format(text: str) -> dict[str, list[str]]:
    """Parse `thread_id: label_a, label_b` lines, skipping anything else."""
    assignments: dict[str, list[str]] = {}
    for line in text.splitlines():
        thread_id, sep, labels_part = line.strip().partition(":")
        if not sep:
            continue
        thread_id = thread_id.strip()
        label_ids = [label.strip() for label in labels_part.split(",") if label.strip()]
        if thread_id and label_ids:
            assignments.setdefault(thread_id, []).extend(label_ids)
    return assignments


def parse_smart_label_response(raw_text: str) -> dict[str, Any]:
    """
    Parse a model response into thread id -> label ids.

    Accepts the JSON shape from the prompt (optionally wrapped in markdown
    fences) and falls back to one `thread_id: label, label` pair per line.

    Raises:
        AiError: malformed_response if neither format yields a mapping
    """
    text = _strip_code_fences(raw_text.strip())
    if not text:
        raise AiError(AiErrorCode.MALFORMED_RESPONSE, "Empty response from model")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None

    if data is not None:
        try:
            return SmartLabelResponse.model_validate(data).assignments
        except ValidationError as e:
            raise AiError(
                AiErrorCode.MALFORMED_RESPONSE, f"Response JSON has unexpected shape: {e}"
            ) from e

    assignments = _parse_line_format(text)
    if not assignments:
        raise AiError(AiErrorCode.MALFORMED_RESPONSE, "Could not parse model response")

    logger.debug("Parsed smart label response via line format (%d threads)", len(assignments))
    return assignments


class GeminiSmartLabelGateway:
    """ClassificationGateway that asks Gemini which labels fit which threads."""

    def __init__(
        self,
        credentials: GeminiCredentials | None = None,
        *,
        timeout_seconds: float = config.LLM_TIMEOUT_SECONDS,
        max_retries: int = config.LLM_MAX_RETRIES,
        retry_base_delay: float = 1.0,
    ) -> None:
        self._credentials = credentials
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.retry_base_delay = retry_base_delay

    def classify(
        self,
        candidates: list[ThreadCandidate],
        label_defs: list[LabelDefinition],
    ) -> dict[str, Any]:
        """
        Classify candidate threads against label descriptions.

        Side Effects:
            Builds a Gemini handle and makes up to `max_retries` model calls.

        Raises:
            AiError: On any configuration, transport, or parsing failure
        """
        if not candidates or not label_defs:
            return {}

        if not config.USE_LLM:
            raise AiError(AiErrorCode.NOT_CONFIGURED, "LLM disabled (LABELQ_USE_LLM=false)")

        credentials = self._credentials or GeminiCredentials.from_env()
        try:
            handle = create_gemini_handle(credentials)
        except GeminiInitializationError as e:
            raise AiError(AiErrorCode.NOT_CONFIGURED, str(e)) from e

        prompt = build_smart_label_prompt(candidates, label_defs)
        raw_text = self._call_model(handle, prompt)
        return parse_smart_label_response(raw_text)

    def _call_model(self, handle: GeminiHandle, prompt: str) -> str:
        """Call the model, retrying transient failures with exponential backoff.

        Auth errors are final on the first attempt.

        Side Effects:
            Makes HTTP requests to the Gemini API.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_base_delay, max=10),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            return retrying(self._call_once, handle, prompt)
        except AiError as e:
            logger.error("Gemini call failed: %s", e)
            raise

    def _call_once(self, handle: GeminiHandle, prompt: str) -> str:
        """One model call bounded by `timeout_seconds`.

        Raises:
            AiError: Any failure, classified by code
        """
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(
                handle.generate_text,
                prompt,
                temperature=config.LLM_TEMPERATURE,
                max_output_tokens=config.LLM_MAX_OUTPUT_TOKENS,
            )
            try:
                return future.result(timeout=self.timeout_seconds)
            except concurrent.futures.TimeoutError:
                logger.warning("Gemini call timed out after %ss", self.timeout_seconds)
                raise TimeoutError(f"Gemini call timed out after {self.timeout_seconds}s") from None
        except Exception as e:
            raise classify_ai_exception(e) from e
        finally:
            # Don't block on a hung call past its timeout
            executor.shutdown(wait=False, cancel_futures=True)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, AiError) and exc.code is not AiErrorCode.AUTH_ERROR
