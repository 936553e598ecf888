"""
Smart label API endpoints

Rule management (list/create/update/delete) and the backfill trigger.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import ValidationError

from labelq.api.models import (
    BackfillRequest,
    BackfillResponse,
    SmartLabelRuleCreate,
    SmartLabelRuleResponse,
    SmartLabelRuleUpdate,
)
from labelq.observability.logging import get_logger
from labelq.observability.telemetry import counter
from labelq.smart_labels.service import SmartLabelService
from labelq.storage.smart_label_rules import SmartLabelRuleRepository
from labelq.utils.error_sanitizer import get_safe_error_detail, sanitize_error_message

router = APIRouter(prefix="/api", tags=["smart-labels"])
logger = get_logger(__name__)


def get_rule_repository() -> SmartLabelRuleRepository:
    return SmartLabelRuleRepository()


def get_smart_label_service() -> SmartLabelService:
    return SmartLabelService()


@router.get("/accounts/{account_id}/smart-labels", response_model=list[SmartLabelRuleResponse])
async def list_smart_labels(
    account_id: str,
    repo: SmartLabelRuleRepository = Depends(get_rule_repository),
) -> list[SmartLabelRuleResponse]:
    """All rules for the account, enabled or not, in presentation order."""
    return [SmartLabelRuleResponse.from_rule(rule) for rule in repo.list_for_account(account_id)]


@router.post(
    "/accounts/{account_id}/smart-labels",
    response_model=SmartLabelRuleResponse,
    status_code=201,
)
async def create_smart_label(
    account_id: str,
    body: SmartLabelRuleCreate,
    repo: SmartLabelRuleRepository = Depends(get_rule_repository),
) -> SmartLabelRuleResponse:
    try:
        rule = repo.create(
            account_id=account_id,
            label_id=body.label_id,
            ai_description=body.ai_description,
            criteria=body.criteria,
            is_enabled=body.is_enabled,
            sort_order=body.sort_order,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e), 400)) from None

    counter("api.smart_labels.created")
    return SmartLabelRuleResponse.from_rule(rule)


@router.put("/smart-labels/{rule_id}", response_model=SmartLabelRuleResponse)
async def update_smart_label(
    rule_id: str,
    body: SmartLabelRuleUpdate,
    repo: SmartLabelRuleRepository = Depends(get_rule_repository),
) -> SmartLabelRuleResponse:
    """Partial update; only fields present in the body change."""
    changes = body.model_dump(exclude_unset=True, exclude={"criteria"})
    if "criteria" in body.model_fields_set:
        changes["criteria"] = body.criteria

    try:
        rule = repo.update(rule_id, **changes)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e), 400)) from None

    if rule is None:
        raise HTTPException(status_code=404, detail="Smart label rule not found")
    return SmartLabelRuleResponse.from_rule(rule)


@router.delete("/smart-labels/{rule_id}", status_code=204)
async def delete_smart_label(
    rule_id: str,
    repo: SmartLabelRuleRepository = Depends(get_rule_repository),
) -> Response:
    if not repo.delete(rule_id):
        raise HTTPException(status_code=404, detail="Smart label rule not found")
    return Response(status_code=204)


@router.post("/accounts/{account_id}/smart-labels/backfill", response_model=BackfillResponse)
def backfill_smart_labels(
    account_id: str,
    body: BackfillRequest | None = Body(default=None),
    service: SmartLabelService = Depends(get_smart_label_service),
) -> BackfillResponse:
    """
    Re-apply smart labels across the account's inbox.

    Runs synchronously (in FastAPI's threadpool); large inboxes take a while.
    A failure that stops the run is returned as a 500 with a generic message.
    """
    request = body or BackfillRequest()
    try:
        labels_applied = service.backfill(account_id, request.batch_size)
    except Exception as e:
        counter("api.smart_labels.backfill_failed")
        raise HTTPException(
            status_code=500,
            detail=get_safe_error_detail(e, 500, context="Smart label backfill failed"),
        ) from None

    return BackfillResponse(account_id=account_id, labels_applied=labels_applied)
