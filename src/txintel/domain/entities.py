"""Domain model entities for txintel.

These are pure data classes representing business concepts, independent of
database schema. The store layer maps its rows onto them, so categorization
and duplicate detection never see ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Optional


RULE_TYPE_KEYWORD = "keyword"
RULE_TYPE_MERCHANT = "merchant"
RULE_TYPE_AMOUNT_RANGE = "amount_range"
RULE_TYPES = (RULE_TYPE_KEYWORD, RULE_TYPE_MERCHANT, RULE_TYPE_AMOUNT_RANGE)

METHOD_VECTOR_SEARCH = "vector_search"
METHOD_RULES = "rules"
METHOD_DEFAULT = "default"

# Stands in for a missing source file in fingerprint keys
NO_SOURCE_FILE = "null"


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure."""

    id: int
    name: str
    parent_id: Optional[int]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    Identity fields (owner_id through source_file) define the duplicate
    fingerprint. ``category_id`` and ``embedding`` are written by the
    categorization pipeline; ``created_at`` decides which duplicate survives.
    """

    id: str
    owner_id: str
    account_id: str
    date: date
    amount: Decimal
    description: str
    import_method: str
    source_file: Optional[str]
    merchant_name: Optional[str]
    category_id: Optional[int]
    embedding: Optional[tuple[float, ...]]
    created_at: datetime


@dataclass(frozen=True)
class CategorizationRule:
    """User-defined categorization rule.

    ``conditions`` holds the type-specific payload: ``keywords`` for keyword
    rules, ``merchants`` for merchant rules, ``min_amount``/``max_amount`` for
    amount range rules.
    """

    id: int
    name: str
    rule_type: str
    conditions: dict[str, Any]
    category_id: int
    priority: int
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class SimilarTransaction:
    """A stored transaction found near a query embedding."""

    id: str
    text: str
    category_id: Optional[int]
    category_name: Optional[str]
    similarity: float


@dataclass(frozen=True)
class CategorizationDecision:
    """Outcome of categorizing one transaction."""

    category_id: Optional[int]
    confidence: float
    method: str
    similar_transactions: tuple[SimilarTransaction, ...] = ()


@dataclass(frozen=True)
class BatchCategorizationResult:
    """Counts reported by a batch re-categorization run."""

    processed: int
    skipped: int
    errors: int


@dataclass(frozen=True)
class Fingerprint:
    """Identity fields shared by transactions that record the same event."""

    owner_id: str
    account_id: str
    date: date
    amount: Decimal
    description: str
    import_method: str
    source_file: Optional[str]

    def key(self) -> str:
        """Return a stable string form, used for ordering and reporting."""
        return "|".join(
            [
                self.owner_id,
                self.account_id,
                self.date.isoformat(),
                str(self.amount),
                self.description,
                self.import_method,
                self.source_file if self.source_file is not None else NO_SOURCE_FILE,
            ]
        )


@dataclass(frozen=True)
class DuplicateGroup:
    """Transactions sharing one fingerprint, oldest first."""

    fingerprint: Fingerprint
    transaction_ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.transaction_ids)


@dataclass(frozen=True)
class DuplicateSummary:
    """Duplicate totals for one import method."""

    import_method: str
    duplicate_groups: int
    total_duplicate_transactions: int


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a duplicate cleanup run.

    ``failed_groups`` pairs each fingerprint key that could not be cleaned
    with the error message; those groups are left for the next run.
    ``deleted_transaction_ids`` lists the surplus IDs this run issued deletes
    for, while ``deleted_count`` counts the rows the store actually removed;
    the count is smaller when another run removed some of them first.
    """

    deleted_count: int
    kept_transaction_ids: tuple[str, ...]
    deleted_transaction_ids: tuple[str, ...] = ()
    failed_groups: tuple[tuple[str, str], ...] = field(default_factory=tuple)
