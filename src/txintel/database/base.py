"""Abstract database interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from txintel.domain.entities import (
    Category,
    CategorizationRule,
    Fingerprint,
    SimilarTransaction,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for txintel.

    Implementations raise ``StoreUnavailable`` for any failure of the
    underlying store.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, parent_id: Optional[int] = None, is_active: bool = True) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact, case-sensitive name."""
        pass

    @abstractmethod
    def list_categories(self, active_only: bool = False) -> list[Category]:
        """List categories ordered by name."""
        pass

    # Categorization rule operations
    @abstractmethod
    def create_rule(
        self,
        name: str,
        rule_type: str,
        conditions: dict[str, Any],
        category_id: int,
        priority: int = 0,
        is_active: bool = True,
    ) -> int:
        """Create a categorization rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[CategorizationRule]:
        """Get categorization rule by ID."""
        pass

    @abstractmethod
    def list_rules(self, active_only: bool = True) -> list[CategorizationRule]:
        """List rules by descending priority (ties by ascending ID)."""
        pass

    @abstractmethod
    def update_rule(
        self,
        rule_id: int,
        name: Optional[str] = None,
        conditions: Optional[dict[str, Any]] = None,
        category_id: Optional[int] = None,
        priority: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update the provided rule fields."""
        pass

    @abstractmethod
    def delete_rule(self, rule_id: int) -> None:
        """Delete a categorization rule."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        owner_id: str,
        account_id: str,
        date: date,
        amount: Decimal,
        description: str,
        import_method: str,
        source_file: Optional[str] = None,
        merchant_name: Optional[str] = None,
        category_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: Optional[str] = None,
        uncategorized: bool = False,
    ) -> list[Transaction]:
        """List transactions, newest date first.

        Args:
            owner_id: Optional owner filter
            uncategorized: If True, only return transactions without a category
        """
        pass

    @abstractmethod
    def scan_transactions(self, owner_id: Optional[str] = None, batch_size: int = 500) -> Iterator[Transaction]:
        """Stream transactions ordered by owner, account and date."""
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: str, category_id: Optional[int]) -> None:
        """Update transaction category."""
        pass

    @abstractmethod
    def update_transaction_embedding(self, transaction_id: str, embedding: Sequence[float]) -> None:
        """Store the embedding vector computed for a transaction."""
        pass

    @abstractmethod
    def find_transactions_by_fingerprint(self, fingerprint: Fingerprint) -> list[Transaction]:
        """Get all transactions matching a fingerprint, oldest first.

        Ordering is by creation time, then ID, so the first element is the
        record a cleanup keeps.
        """
        pass

    @abstractmethod
    def delete_transactions(self, transaction_ids: Iterable[str]) -> int:
        """Delete transactions by ID in one store transaction.

        IDs that no longer exist are ignored. Returns the number of rows
        actually removed.
        """
        pass

    @abstractmethod
    def find_similar_transactions(
        self,
        embedding: Sequence[float],
        threshold: float,
        limit: int,
        exclude_id: Optional[str] = None,
        max_candidates: Optional[int] = None,
    ) -> list[SimilarTransaction]:
        """Find stored transactions whose embedding is close to ``embedding``.

        Returns at most ``limit`` transactions with cosine similarity of at
        least ``threshold``, most similar first. When ``max_candidates`` is
        set, only that many most recently created embedded transactions are
        scored.
        """
        pass
