"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal

from txintel.domain import entities as domain
from txintel.database.models import (
    Category as ORMCategory,
    CategorizationRule as ORMCategorizationRule,
    Transaction as ORMTransaction,
)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        parent_id=orm_category.parent_id,
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def rule_to_domain(orm_rule: ORMCategorizationRule) -> domain.CategorizationRule:
    """Convert SQLAlchemy CategorizationRule model to domain entity."""
    return domain.CategorizationRule(
        id=orm_rule.id,
        name=orm_rule.name,
        rule_type=orm_rule.rule_type,
        conditions=dict(orm_rule.conditions or {}),
        category_id=orm_rule.category_id,
        priority=orm_rule.priority,
        is_active=orm_rule.is_active,
        created_at=orm_rule.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    embedding = orm_transaction.embedding
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        description=orm_transaction.description,
        import_method=orm_transaction.import_method,
        source_file=orm_transaction.source_file,
        merchant_name=orm_transaction.merchant_name,
        category_id=orm_transaction.category_id,
        embedding=tuple(float(v) for v in embedding) if embedding is not None else None,
        created_at=orm_transaction.created_at,
    )
