"""Duplicate transaction cleanup."""

from typing import Optional

from txintel.database.base import Database
from txintel.domain.duplicates import DuplicateAnalyzer
from txintel.domain.entities import CleanupResult, DuplicateGroup
from txintel.domain.errors import StoreUnavailable
from txintel.logging_setup import get_logger

logger = get_logger(__name__)


class CleanupService:
    """Deletes all but the oldest transaction of every duplicate group.

    Each group is re-read from the store before deleting, and its surplus
    members are removed with one idempotent delete-by-ID, so an interrupted
    or concurrent run leaves at worst a smaller group for the next run.
    """

    def __init__(self, db: Database, analyzer: Optional[DuplicateAnalyzer] = None):
        """Initialize cleanup service.

        Args:
            db: Database instance
            analyzer: Duplicate analyzer; defaults to one over ``db``
        """
        self.db = db
        self.analyzer = analyzer or DuplicateAnalyzer(db)

    def clean_duplicates(self, owner_id: Optional[str] = None) -> CleanupResult:
        """Remove duplicate transactions, keeping the oldest of each group.

        A failure on one group is recorded in ``failed_groups`` and the
        remaining groups are still cleaned. A group the scan reported but
        the fresh read no longer finds is recorded there too.

        Args:
            owner_id: Optional owner to restrict the cleanup to

        Raises:
            StoreUnavailable: If the initial duplicate scan fails
        """
        groups = self.analyzer.find_duplicate_groups(owner_id=owner_id)

        deleted_count = 0
        kept: list[str] = []
        deleted: list[str] = []
        failed: list[tuple[str, str]] = []

        for group in groups:
            try:
                keep_id, removed_ids, removed = self._clean_group(group)
            except StoreUnavailable as e:
                logger.error("Could not clean duplicate group %s: %s", group.fingerprint.key(), e)
                failed.append((group.fingerprint.key(), str(e)))
                continue
            if keep_id is None:
                logger.warning(
                    "Duplicate group %s not found on re-read", group.fingerprint.key()
                )
                failed.append((group.fingerprint.key(), "group not found on re-read"))
                continue
            kept.append(keep_id)
            deleted.extend(removed_ids)
            deleted_count += removed

        logger.info(
            "Deleted %d duplicate transactions, kept %d, %d groups failed",
            deleted_count,
            len(kept),
            len(failed),
        )
        return CleanupResult(
            deleted_count=deleted_count,
            kept_transaction_ids=tuple(kept),
            deleted_transaction_ids=tuple(deleted),
            failed_groups=tuple(failed),
        )

    def _clean_group(self, group: DuplicateGroup) -> tuple[Optional[str], list[str], int]:
        # The fresh read is ordered by creation time then ID; the head survives
        members = self.db.find_transactions_by_fingerprint(group.fingerprint)
        if not members:
            return None, [], 0

        keep = members[0]
        surplus = [m.id for m in members[1:]]
        removed = self.db.delete_transactions(surplus) if surplus else 0
        if removed < len(surplus):
            logger.warning(
                "Expected to delete %d duplicates of %s, store removed %d",
                len(surplus),
                keep.id,
                removed,
            )
        if surplus:
            logger.info(
                "Kept transaction %s, deleted %d duplicates: %s",
                keep.id,
                removed,
                ", ".join(surplus),
            )
        return keep.id, surplus, removed
