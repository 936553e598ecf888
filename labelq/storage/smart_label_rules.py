"""
Smart Label Rule Repository - CRUD for the smart_label_rules table.

Also the default RuleStore for the matching engine: get_enabled_rules()
returns validated SmartLabelRule values with criteria parsed once here.
"""

from __future__ import annotations

import time
import uuid

from pydantic import ValidationError

from labelq.infrastructure.database import retry_on_db_lock
from labelq.observability.logging import get_logger
from labelq.storage import BaseRepository
from labelq.storage.models import FilterCriteria, SmartLabelRule

logger = get_logger(__name__)

_UNSET = object()


class SmartLabelRuleRepository(BaseRepository):
    """Repository for smart label rules, scoped by account."""

    def __init__(self) -> None:
        super().__init__("smart_label_rules")

    def _to_rules(self, rows) -> list[SmartLabelRule]:
        rules = []
        for row in rows:
            try:
                rules.append(SmartLabelRule.from_db_row(dict(row)))
            except ValidationError as e:
                logger.warning("Skipping invalid smart label rule %s: %s", row["id"], e)
        return rules

    def get_enabled_rules(self, account_id: str) -> list[SmartLabelRule]:
        """
        Enabled rules for an account, in presentation order.

        Side Effects: None (read-only query)
        """
        rows = self.query_all(
            """
            SELECT * FROM smart_label_rules
            WHERE account_id = ? AND is_enabled = 1
            ORDER BY sort_order, created_at
            """,
            (account_id,),
        )
        return self._to_rules(rows)

    def list_for_account(self, account_id: str) -> list[SmartLabelRule]:
        """All rules for an account, enabled or not."""
        rows = self.query_all(
            """
            SELECT * FROM smart_label_rules
            WHERE account_id = ?
            ORDER BY sort_order, created_at
            """,
            (account_id,),
        )
        return self._to_rules(rows)

    def get(self, rule_id: str) -> SmartLabelRule | None:
        row = self.query_one("SELECT * FROM smart_label_rules WHERE id = ?", (rule_id,))
        if not row:
            return None
        return SmartLabelRule.from_db_row(dict(row))

    @retry_on_db_lock()
    def create(
        self,
        account_id: str,
        label_id: str,
        ai_description: str,
        criteria: FilterCriteria | None = None,
        is_enabled: bool = True,
        sort_order: int = 0,
    ) -> SmartLabelRule:
        """
        Create a rule.

        Returns:
            The created rule with a generated id

        Raises:
            ValidationError: If label_id or ai_description is empty

        Side Effects:
            - Inserts one row into smart_label_rules
        """
        rule = SmartLabelRule(
            id=str(uuid.uuid4()),
            account_id=account_id,
            label_id=label_id,
            ai_description=ai_description,
            criteria=criteria if criteria and not criteria.is_empty() else None,
            is_enabled=is_enabled,
            sort_order=sort_order,
            created_at=int(time.time() * 1000),
        )

        self.execute(
            """
            INSERT INTO smart_label_rules (
                id, account_id, label_id, ai_description, criteria_json,
                is_enabled, sort_order, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                rule.id,
                rule.account_id,
                rule.label_id,
                rule.ai_description,
                rule.criteria.to_json() if rule.criteria else None,
                int(rule.is_enabled),
                rule.sort_order,
                rule.created_at,
            ),
        )

        logger.info("Created smart label rule %s for account %s", rule.id, account_id)
        return rule

    @retry_on_db_lock()
    def update(
        self,
        rule_id: str,
        label_id: str | None = None,
        ai_description: str | None = None,
        criteria: FilterCriteria | None | object = _UNSET,
        is_enabled: bool | None = None,
        sort_order: int | None = None,
    ) -> SmartLabelRule | None:
        """
        Partially update a rule. Passing criteria=None clears the criteria.

        Returns:
            The updated rule, or None if it doesn't exist

        Side Effects:
            - Updates one row in smart_label_rules
        """
        existing = self.get(rule_id)
        if existing is None:
            return None

        changes: dict = {}
        if label_id is not None:
            changes["label_id"] = label_id
        if ai_description is not None:
            changes["ai_description"] = ai_description
        if criteria is not _UNSET:
            changes["criteria"] = criteria if criteria and not criteria.is_empty() else None
        if is_enabled is not None:
            changes["is_enabled"] = is_enabled
        if sort_order is not None:
            changes["sort_order"] = sort_order

        if not changes:
            return existing

        # Re-validate through the model so empty descriptions are rejected
        updated = SmartLabelRule.model_validate({**existing.model_dump(), **changes})

        self.execute(
            """
            UPDATE smart_label_rules
            SET label_id = ?, ai_description = ?, criteria_json = ?,
                is_enabled = ?, sort_order = ?
            WHERE id = ?
            """,
            (
                updated.label_id,
                updated.ai_description,
                updated.criteria.to_json() if updated.criteria else None,
                int(updated.is_enabled),
                updated.sort_order,
                rule_id,
            ),
        )

        logger.info("Updated smart label rule %s (%s)", rule_id, ", ".join(sorted(changes)))
        return updated

    @retry_on_db_lock()
    def delete(self, rule_id: str) -> bool:
        """Delete a rule. Returns False if it didn't exist."""
        deleted = self.execute("DELETE FROM smart_label_rules WHERE id = ?", (rule_id,))
        if deleted:
            logger.info("Deleted smart label rule %s", rule_id)
        return deleted > 0
