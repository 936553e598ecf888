"""
Domain models for the smart label engine.

Inputs that cross a storage or API boundary (criteria, actions, rules,
messages) are Pydantic v2 models validated once at ingress. Transient
results produced while matching and applying are plain dataclasses.
Sensitive message fields are redacted in repr.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from labelq.observability.logging import get_logger
from labelq.utils.redaction import redact

logger = get_logger(__name__)


class RedactedModel(BaseModel):
    """Base model that redacts sensitive fields in repr."""

    model_config = ConfigDict(frozen=True)
    redact_fields: ClassVar[frozenset[str]] = frozenset()

    def redacted(self) -> dict[str, Any]:
        """Telemetry-safe dump."""
        data = self.model_dump(exclude_none=True)
        for name in self.redact_fields:
            if isinstance(data.get(name), str) and data[name]:
                data[name] = redact(data[name])
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.redacted()})"


# =============================================================================
# Filter criteria and actions
# =============================================================================


class FilterCriteria(BaseModel):
    """
    Deterministic predicate set. Every set field must pass (AND).

    String fields are case-insensitive substring tests. Unset or empty fields
    are ignored, so an empty FilterCriteria matches everything.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    subject: str | None = None
    body: str | None = None
    has_attachment: bool = Field(default=False, alias="hasAttachment")

    @field_validator("has_attachment", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def is_empty(self) -> bool:
        return not (self.from_ or self.to or self.subject or self.body or self.has_attachment)

    def to_json(self) -> str:
        """Serialize using the stored (camelCase) keys, omitting unset fields."""
        return json.dumps(self.model_dump(by_alias=True, exclude_defaults=True))


def parse_criteria(raw: str | Mapping[str, Any] | None) -> FilterCriteria | None:
    """
    Parse stored criteria into a FilterCriteria, failing closed.

    Returns None for missing, empty, or invalid criteria. A rule whose
    criteria can't be parsed is decided by the classification path only,
    never treated as always-matching.
    """
    if raw is None or raw == "":
        return None

    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(data, Mapping):
            raise ValueError(f"criteria must be an object, got {type(data).__name__}")
        criteria = FilterCriteria.model_validate(dict(data))
    except ValueError as e:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
        logger.warning("Ignoring invalid smart label criteria: %s", e)
        return None

    return None if criteria.is_empty() else criteria


class FilterActions(BaseModel):
    """Declarative outcome set for a deterministic filter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    apply_label: str | None = Field(default=None, alias="applyLabel")
    archive: bool = False
    trash: bool = False
    star: bool = False
    mark_read: bool = Field(default=False, alias="markRead")


@dataclass
class CompiledActions:
    """Label add/remove operations and flags compiled from FilterActions."""

    add_label_ids: list[str] = field(default_factory=list)
    remove_label_ids: list[str] = field(default_factory=list)
    mark_read: bool = False
    star: bool = False


# =============================================================================
# Rules and messages
# =============================================================================


class SmartLabelRule(BaseModel):
    """A destination label plus optional criteria and an AI description."""

    model_config = ConfigDict(frozen=True)

    id: str
    account_id: str
    label_id: str = Field(min_length=1)
    ai_description: str
    criteria: FilterCriteria | None = None
    is_enabled: bool = True
    sort_order: int = 0
    created_at: int = 0

    @field_validator("ai_description")
    @classmethod
    def _require_description(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ai_description must not be empty")
        return value

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> SmartLabelRule:
        return cls(
            id=row["id"],
            account_id=row["account_id"],
            label_id=row["label_id"],
            ai_description=row["ai_description"],
            criteria=parse_criteria(row["criteria_json"]),
            is_enabled=bool(row["is_enabled"]),
            sort_order=row["sort_order"] or 0,
            created_at=row["created_at"] or 0,
        )


class NormalizedMessage(RedactedModel):
    """The matching engine's flat view of one email."""

    redact_fields: ClassVar[frozenset[str]] = frozenset(
        {"from_address", "from_name", "to_addresses", "subject", "snippet", "body_text", "body_html"}
    )

    id: str
    thread_id: str
    from_address: str | None = None
    from_name: str | None = None
    to_addresses: str | None = None
    subject: str | None = None
    snippet: str = ""
    body_text: str | None = None
    body_html: str | None = None
    has_attachments: bool = False
    date: int = 0

    @field_validator("to_addresses", mode="before")
    @classmethod
    def _join_recipients(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            joined = ", ".join(str(v) for v in value if v)
            return joined or None
        return value

    @field_validator("snippet", mode="before")
    @classmethod
    def _snippet_default(cls, value: Any) -> Any:
        return "" if value is None else value


# =============================================================================
# Matching and application results
# =============================================================================


@dataclass(frozen=True)
class ThreadCandidate:
    """One thread sent to the classification gateway."""

    thread_id: str
    subject: str
    snippet: str
    sender_address: str


@dataclass(frozen=True)
class LabelDefinition:
    """A label the classification gateway may assign, with its description."""

    label_id: str
    description: str


@dataclass
class SmartLabelMatch:
    """Labels to apply to one thread. Transient, never persisted."""

    thread_id: str
    label_ids: list[str]


@dataclass(frozen=True)
class LabelApplyOutcome:
    """Settled result of one add-label-to-thread call."""

    thread_id: str
    label_id: str
    succeeded: bool
    error: str | None = None


@dataclass
class InboxThreadRow:
    """An inbox thread joined with its latest message, as read for backfill."""

    thread_id: str
    message_id: str | None
    subject: str | None
    snippet: str | None
    from_address: str | None
    from_name: str | None
    to_addresses: str | None
    body_text: str | None
    body_html: str | None
    has_attachments: bool

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> InboxThreadRow:
        return cls(
            thread_id=row["thread_id"],
            message_id=row["message_id"],
            subject=row["subject"],
            snippet=row["snippet"],
            from_address=row["from_address"],
            from_name=row["from_name"],
            to_addresses=row["to_addresses"],
            body_text=row["body_text"],
            body_html=row["body_html"],
            has_attachments=bool(row["has_attachments"]),
        )

    def to_message(self) -> NormalizedMessage:
        # Date isn't projected; smart label criteria never look at it
        return NormalizedMessage(
            id=self.message_id or self.thread_id,
            thread_id=self.thread_id,
            from_address=self.from_address,
            from_name=self.from_name,
            to_addresses=self.to_addresses,
            subject=self.subject,
            snippet=self.snippet or "",
            body_text=self.body_text,
            body_html=self.body_html,
            has_attachments=self.has_attachments,
        )
