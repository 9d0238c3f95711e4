"""Nearest-neighbour lookup over stored transaction embeddings."""

from collections.abc import Sequence
from typing import Optional

from txintel.database.base import Database
from txintel.domain.entities import SimilarTransaction

DEFAULT_MATCH_THRESHOLD = 0.70
DEFAULT_MATCH_COUNT = 10
DEFAULT_MAX_CANDIDATES = 10000


class VectorSearchAdapter:
    """Asks the store for the transactions closest to an embedding."""

    def __init__(
        self,
        db: Database,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
        max_candidates: Optional[int] = DEFAULT_MAX_CANDIDATES,
    ):
        """Initialize the adapter.

        Args:
            db: Database instance
            threshold: Minimum cosine similarity for a neighbour
            limit: Maximum number of neighbours returned
            max_candidates: Ceiling on stored embeddings scored per search,
                newest first; None scores all of them
        """
        self.db = db
        self.threshold = threshold
        self.limit = limit
        self.max_candidates = max_candidates

    def search(self, embedding: Sequence[float], exclude_id: Optional[str] = None) -> list[SimilarTransaction]:
        """Return up to ``limit`` neighbours at or above ``threshold``, most similar first.

        Args:
            embedding: Query vector
            exclude_id: Transaction to leave out, normally the one being categorized

        Raises:
            StoreUnavailable: If the store search fails
        """
        if self.limit <= 0 or not embedding:
            return []
        neighbours = self.db.find_similar_transactions(
            embedding,
            threshold=self.threshold,
            limit=self.limit,
            exclude_id=exclude_id,
            max_candidates=self.max_candidates,
        )
        neighbours = [n for n in neighbours if n.similarity >= self.threshold]
        neighbours.sort(key=lambda n: n.similarity, reverse=True)
        return neighbours[: self.limit]
