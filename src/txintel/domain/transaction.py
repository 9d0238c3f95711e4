"""Transaction domain service."""

from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from txintel.database.base import Database
from txintel.domain.duplicates import DuplicateAnalyzer
from txintel.domain.entities import Fingerprint, Transaction as TransactionEntity
from txintel.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_transaction,
    transaction_not_found,
)
from txintel.utils.amount_parser import to_cents


class TransactionService:
    """Service for recording transactions from import paths."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.analyzer = DuplicateAnalyzer(db)

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
        allow_duplicate: bool = False,
    ) -> str:
        """Create a transaction unless an identical one is already stored.

        Args:
            owner_id: Owning user
            account_id: Account the transaction belongs to
            date: Transaction date
            amount: Signed amount
            description: Transaction description text
            import_method: How the transaction arrived (e.g. "plaid", "csv", "manual")
            source_file: Imported file name, if any
            merchant_name: Optional merchant name
            category_id: Optional category ID
            created_at: Creation timestamp; defaults to now
            allow_duplicate: Insert even when the fingerprint already exists

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a required field is empty or the amount is
                not a finite number
            NotFoundError: If the category doesn't exist
            ConflictError: If an identical transaction exists and duplicates
                are not allowed
        """
        for field_name, value in (
            ("owner_id", owner_id),
            ("account_id", account_id),
            ("description", description),
            ("import_method", import_method),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"'{field_name}' is required")

        try:
            amount = to_cents(amount)
        except ValueError as e:
            raise ValidationError(str(e))

        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        if not allow_duplicate:
            existing = self.analyzer.find_existing(
                Fingerprint(
                    owner_id=owner_id,
                    account_id=account_id,
                    date=date,
                    amount=amount,
                    description=description,
                    import_method=import_method,
                    source_file=source_file,
                )
            )
            if existing is not None:
                raise ConflictError(duplicate_transaction(existing.id))

        return self.db.create_transaction(
            owner_id=owner_id,
            account_id=account_id,
            date=date,
            amount=amount,
            description=description,
            import_method=import_method,
            source_file=source_file,
            merchant_name=merchant_name,
            category_id=category_id,
            created_at=created_at,
        )

    def get_transaction(self, transaction_id: str) -> TransactionEntity:
        """Get transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self, owner_id: Optional[str] = None, uncategorized: bool = False
    ) -> list[TransactionEntity]:
        """List transactions, newest first."""
        return self.db.list_transactions(owner_id=owner_id, uncategorized=uncategorized)
