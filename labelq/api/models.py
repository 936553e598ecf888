"""Pydantic models for LabelQ API requests and responses"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from labelq.config import BACKFILL_BATCH_SIZE, BACKFILL_BATCH_SIZE_MAX
from labelq.storage.models import FilterCriteria, SmartLabelRule


def _require_text(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be empty")
    return value


class SmartLabelRuleCreate(BaseModel):
    """Request to create a smart label rule."""

    label_id: str = Field(min_length=1, max_length=200)
    ai_description: str = Field(min_length=1, max_length=2000)
    criteria: FilterCriteria | None = None
    is_enabled: bool = True
    sort_order: int = 0

    @field_validator("label_id", "ai_description")
    @classmethod
    def _not_blank(cls, value: str | None) -> str | None:
        return _require_text(value)


class SmartLabelRuleUpdate(BaseModel):
    """
    Partial update. Omitted fields are left alone; an explicit
    `"criteria": null` clears the criteria.
    """

    label_id: str | None = Field(default=None, min_length=1, max_length=200)
    ai_description: str | None = Field(default=None, min_length=1, max_length=2000)
    criteria: FilterCriteria | None = None
    is_enabled: bool | None = None
    sort_order: int | None = None

    @field_validator("label_id", "ai_description")
    @classmethod
    def _not_blank(cls, value: str | None) -> str | None:
        return _require_text(value)


class SmartLabelRuleResponse(BaseModel):
    """API response for one rule. Criteria use the stored camelCase keys."""

    id: str
    account_id: str
    label_id: str
    ai_description: str
    criteria: dict | None
    is_enabled: bool
    sort_order: int
    created_at: int

    @classmethod
    def from_rule(cls, rule: SmartLabelRule) -> SmartLabelRuleResponse:
        return cls(
            id=rule.id,
            account_id=rule.account_id,
            label_id=rule.label_id,
            ai_description=rule.ai_description,
            criteria=(
                rule.criteria.model_dump(by_alias=True, exclude_defaults=True)
                if rule.criteria
                else None
            ),
            is_enabled=rule.is_enabled,
            sort_order=rule.sort_order,
            created_at=rule.created_at,
        )


class BackfillRequest(BaseModel):
    """Request body for a backfill run (optional)."""

    batch_size: int = Field(default=BACKFILL_BATCH_SIZE, ge=1, le=BACKFILL_BATCH_SIZE_MAX)


class BackfillResponse(BaseModel):
    account_id: str
    labels_applied: int
