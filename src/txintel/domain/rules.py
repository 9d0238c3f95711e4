"""Categorization rules: matching and rule management."""

import math
from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Optional

from txintel.database.base import Database
from txintel.domain.entities import (
    CategorizationRule,
    RULE_TYPE_AMOUNT_RANGE,
    RULE_TYPE_KEYWORD,
    RULE_TYPE_MERCHANT,
    RULE_TYPES,
)
from txintel.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    rule_not_found,
)

# Condition key holding the match terms for each text rule type
_TERM_KEYS = {
    RULE_TYPE_KEYWORD: "keywords",
    RULE_TYPE_MERCHANT: "merchants",
}


def _as_number(value: Any, default: float) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _terms(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [term.lower() for term in value if isinstance(term, str) and term.strip()]


def matches_rule(query_text: str, amount: Optional[Decimal | float], rule: CategorizationRule) -> bool:
    """Return True when ``rule`` matches a transaction.

    Text rules match when any configured term is a case-insensitive substring
    of ``query_text``. Amount range rules compare the absolute amount against
    ``min_amount`` (default 0) and ``max_amount`` (default unbounded), both
    inclusive; a missing amount never matches. Unknown rule types and malformed
    payloads never match.
    """
    conditions = rule.conditions if isinstance(rule.conditions, dict) else {}
    text = query_text.lower()

    if rule.rule_type in _TERM_KEYS:
        return any(term in text for term in _terms(conditions.get(_TERM_KEYS[rule.rule_type])))

    if rule.rule_type == RULE_TYPE_AMOUNT_RANGE:
        min_amount = _as_number(conditions.get("min_amount"), 0.0)
        max_amount = _as_number(conditions.get("max_amount"), math.inf)
        if amount is None or min_amount is None or max_amount is None:
            return False
        magnitude = abs(float(amount))
        return min_amount <= magnitude <= max_amount

    return False


def find_matching_rule(
    query_text: str, amount: Optional[Decimal | float], rules: Iterable[CategorizationRule]
) -> Optional[CategorizationRule]:
    """Return the first matching rule; ``rules`` must be in priority order."""
    for rule in rules:
        if matches_rule(query_text, amount, rule):
            return rule
    return None


def validate_rule_conditions(rule_type: str, conditions: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize a rule condition payload.

    Returns:
        Normalized conditions

    Raises:
        ValidationError: If the rule type is unknown or the payload is invalid
    """
    if rule_type not in RULE_TYPES:
        raise ValidationError(
            f"Unknown rule type '{rule_type}'. Supported types: {', '.join(RULE_TYPES)}"
        )

    if rule_type in _TERM_KEYS:
        key = _TERM_KEYS[rule_type]
        raw = conditions.get(key)
        if not isinstance(raw, (list, tuple)) or not raw:
            raise ValidationError(f"A {rule_type} rule needs a non-empty '{key}' list")
        terms = [t.strip() for t in raw if isinstance(t, str) and t.strip()]
        if len(terms) != len(raw):
            raise ValidationError(f"Every entry in '{key}' must be a non-empty string")
        return {key: terms}

    normalized: dict[str, Any] = {}
    for key in ("min_amount", "max_amount"):
        value = conditions.get(key)
        if value is None:
            continue
        number = _as_number(value, 0.0)
        if number is None or number < 0:
            raise ValidationError(f"'{key}' must be a non-negative number")
        normalized[key] = number
    if normalized.get("min_amount", 0.0) > normalized.get("max_amount", math.inf):
        raise ValidationError("'min_amount' cannot be greater than 'max_amount'")
    return normalized


class RuleService:
    """Service for managing categorization rules."""

    def __init__(self, db: Database):
        """Initialize rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_rule(
        self,
        name: str,
        rule_type: str,
        category_id: int,
        conditions: dict[str, Any],
        priority: int = 0,
        is_active: bool = True,
    ) -> int:
        """Create a categorization rule.

        Args:
            name: Rule name
            rule_type: One of keyword, merchant, amount_range
            category_id: Category assigned when the rule matches
            conditions: Type-specific condition payload
            priority: Higher priorities are evaluated first
            is_active: Whether the rule takes part in categorization

        Returns:
            Rule ID

        Raises:
            ValidationError: If the name, type or payload is invalid
            NotFoundError: If the category doesn't exist
        """
        if not name or not name.strip():
            raise ValidationError("Rule name is required")
        normalized = validate_rule_conditions(rule_type, conditions)
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        return self.db.create_rule(
            name=name.strip(),
            rule_type=rule_type,
            conditions=normalized,
            category_id=category_id,
            priority=priority,
            is_active=is_active,
        )

    def get_rule(self, rule_id: int) -> CategorizationRule:
        """Get a rule, raising NotFoundError when missing."""
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(rule_not_found(rule_id))
        return rule

    def list_rules(self, active_only: bool = True) -> list[CategorizationRule]:
        """List rules in evaluation order (highest priority first)."""
        return self.db.list_rules(active_only=active_only)

    def update_rule(
        self,
        rule_id: int,
        name: Optional[str] = None,
        conditions: Optional[dict[str, Any]] = None,
        category_id: Optional[int] = None,
        priority: Optional[int] = None,
    ) -> None:
        """Update rule fields; conditions are validated against the rule's type."""
        rule = self.get_rule(rule_id)
        if name is not None and not name.strip():
            raise ValidationError("Rule name is required")
        if conditions is not None:
            conditions = validate_rule_conditions(rule.rule_type, conditions)
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        self.db.update_rule(
            rule_id,
            name=name.strip() if name is not None else None,
            conditions=conditions,
            category_id=category_id,
            priority=priority,
        )

    def set_active(self, rule_id: int, is_active: bool) -> None:
        """Enable or disable a rule."""
        self.get_rule(rule_id)
        self.db.update_rule(rule_id, is_active=is_active)

    def delete_rule(self, rule_id: int) -> None:
        """Delete a rule."""
        self.get_rule(rule_id)
        self.db.delete_rule(rule_id)
