"""AI error taxonomy shared by LLM-backed components."""

from __future__ import annotations

from enum import Enum


class AiErrorCode(str, Enum):
    """Why an AI call failed.

    Extends str so codes log and serialize as raw strings.
    """

    NOT_CONFIGURED = "not_configured"
    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"


class AiError(RuntimeError):
    """An AI call failed; `code` says how."""

    def __init__(self, code: AiErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        return f"[{self.code.value}] {super().__str__()}"


def classify_ai_exception(exc: BaseException) -> AiError:
    """
    Map a raw transport/SDK exception onto an AiError.

    Side Effects: None (pure function)
    """
    if isinstance(exc, AiError):
        return exc

    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()

    if any(marker in lowered for marker in ("401", "403", "authentication", "permission")):
        return AiError(AiErrorCode.AUTH_ERROR, "Invalid or unauthorized AI credentials")
    if any(marker in lowered for marker in ("429", "rate limit", "quota", "resource exhausted")):
        return AiError(AiErrorCode.RATE_LIMITED, "Rate limited by AI provider")
    return AiError(AiErrorCode.NETWORK_ERROR, message)
