"""Duplicate transaction detection.

Two transactions are duplicates when their identity fields (owner, account,
date, amount, description, import method, source file) are equal, whatever
their category or creation time. Groups are built in one pass over the
store and list their members oldest first, so the first member is the
canonical record a cleanup keeps.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from txintel.database.base import Database
from txintel.domain.entities import (
    DuplicateGroup,
    DuplicateSummary,
    Fingerprint,
    Transaction,
)
from txintel.logging_setup import get_logger
from txintel.utils.amount_parser import to_cents

logger = get_logger(__name__)


def build_fingerprint(txn: Transaction) -> Fingerprint:
    """Return the duplicate fingerprint of a transaction."""
    return Fingerprint(
        owner_id=txn.owner_id,
        account_id=txn.account_id,
        date=txn.date,
        amount=to_cents(txn.amount),
        description=txn.description,
        import_method=txn.import_method,
        source_file=txn.source_file,
    )


def group_duplicates(transactions: Iterable[Transaction]) -> list[DuplicateGroup]:
    """Group transactions by fingerprint and keep groups with more than one member.

    The result does not depend on input order: members are sorted by
    creation time then ID, and groups by descending size then fingerprint key.
    """
    members: dict[Fingerprint, list[Transaction]] = {}
    for txn in transactions:
        members.setdefault(build_fingerprint(txn), []).append(txn)

    groups = [
        DuplicateGroup(
            fingerprint=fingerprint,
            transaction_ids=tuple(t.id for t in sorted(txns, key=lambda t: (t.created_at, t.id))),
        )
        for fingerprint, txns in members.items()
        if len(txns) > 1
    ]
    groups.sort(key=lambda g: (-g.count, g.fingerprint.key()))
    return groups


def summarize_groups(groups: Iterable[DuplicateGroup]) -> list[DuplicateSummary]:
    """Aggregate duplicate groups per import method, ordered by method."""
    totals: dict[str, tuple[int, int]] = {}
    for group in groups:
        method = group.fingerprint.import_method
        group_count, txn_count = totals.get(method, (0, 0))
        totals[method] = (group_count + 1, txn_count + group.count)

    return [
        DuplicateSummary(
            import_method=method,
            duplicate_groups=group_count,
            total_duplicate_transactions=txn_count,
        )
        for method, (group_count, txn_count) in sorted(totals.items())
    ]


class DuplicateAnalyzer:
    """Finds and inspects duplicate transaction groups in the store."""

    def __init__(self, db: Database):
        """Initialize duplicate analyzer.

        Args:
            db: Database instance
        """
        self.db = db

    def find_duplicate_groups(self, owner_id: Optional[str] = None) -> list[DuplicateGroup]:
        """Return all duplicate groups, largest first.

        Args:
            owner_id: Optional owner to restrict the scan to

        Raises:
            StoreUnavailable: If the scan fails
        """
        groups = group_duplicates(self.db.scan_transactions(owner_id=owner_id))
        logger.info(
            "Found %d duplicate groups covering %d transactions",
            len(groups),
            sum(g.count for g in groups),
        )
        return groups

    def summarize_by_import_method(
        self,
        owner_id: Optional[str] = None,
        groups: Optional[list[DuplicateGroup]] = None,
    ) -> list[DuplicateSummary]:
        """Summarize duplicate groups per import method.

        Args:
            owner_id: Optional owner to restrict the scan to
            groups: Previously found groups; scanned afresh when None
        """
        if groups is None:
            groups = self.find_duplicate_groups(owner_id=owner_id)
        return summarize_groups(groups)

    def get_group_details(self, fingerprint: Fingerprint) -> list[Transaction]:
        """Return full records for one fingerprint, oldest first."""
        return self.db.find_transactions_by_fingerprint(fingerprint)

    def get_duplicate_details(
        self,
        owner_id: str,
        account_id: str,
        date: date,
        amount: Decimal,
        description: str,
        import_method: str,
        source_file: Optional[str] = None,
    ) -> list[Transaction]:
        """Return full records for the group with the given identity fields, oldest first."""
        return self.get_group_details(
            Fingerprint(
                owner_id=owner_id,
                account_id=account_id,
                date=date,
                amount=to_cents(amount),
                description=description,
                import_method=import_method,
                source_file=source_file,
            )
        )

    def find_existing(self, fingerprint: Fingerprint) -> Optional[Transaction]:
        """Return the oldest stored transaction with this fingerprint, if any."""
        matches = self.get_group_details(fingerprint)
        return matches[0] if matches else None

    def is_duplicate(self, fingerprint: Fingerprint) -> bool:
        """Return True when a stored transaction already has this fingerprint."""
        return self.find_existing(fingerprint) is not None
