"""Transaction categorization pipeline.

Each transaction is categorized in three tiers, stopping at the first that
produces an answer:

1. Vector search: embed ``merchant + description``, store the embedding on
   the transaction, and take a weighted vote among the nearest stored
   transactions. A category's weight is ``count * summed similarity``, so
   it must be both frequent and close among the neighbours; the vote is
   trusted only when the winning weight exceeds ``VOTE_THRESHOLD``.
2. Rules: the first active rule, by descending priority, that matches.
3. Default: the category named "Other", or no category when it is missing.

Embedding and store failures inside the pipeline are logged and the next
tier is tried, so ``categorize`` only raises ``InvalidInput``.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

from txintel.database.base import Database
from txintel.domain.entities import (
    BatchCategorizationResult,
    CategorizationDecision,
    METHOD_DEFAULT,
    METHOD_RULES,
    METHOD_VECTOR_SEARCH,
    SimilarTransaction,
)
from txintel.domain.errors import (
    DomainError,
    EmbeddingUnavailable,
    InvalidInput,
    NotFoundError,
    StoreUnavailable,
    missing_categorization_fields,
    transaction_not_found,
)
from txintel.domain.rules import find_matching_rule
from txintel.domain.vector_search import VectorSearchAdapter
from txintel.embeddings.base import EmbeddingClient
from txintel.logging_setup import get_logger

logger = get_logger(__name__)

VOTE_THRESHOLD = 0.5
RULE_CONFIDENCE = 0.7
DEFAULT_CONFIDENCE = 0.1
MAX_SUPPORTING_TRANSACTIONS = 5
DEFAULT_CATEGORY_NAME = "Other"


def build_query_text(merchant_name: Optional[str], description: str) -> str:
    """Return the text that is embedded and matched against rules."""
    return f"{(merchant_name or '').strip()} {description}"


def tally_votes(neighbours: Sequence[SimilarTransaction]) -> dict[int, tuple[int, float]]:
    """Map each neighbour category to ``(count, summed similarity)``.

    Neighbours without a category cast no vote.
    """
    votes: dict[int, tuple[int, float]] = {}
    for neighbour in neighbours:
        if neighbour.category_id is None:
            continue
        count, total = votes.get(neighbour.category_id, (0, 0.0))
        votes[neighbour.category_id] = (count + 1, total + neighbour.similarity)
    return votes


def pick_category(neighbours: Sequence[SimilarTransaction]) -> Optional[tuple[int, float]]:
    """Return ``(category_id, weighted score)`` of the vote winner, or None.

    On equal scores the category seen first among the neighbours wins.
    """
    best: Optional[tuple[int, float]] = None
    for category_id, (count, total) in tally_votes(neighbours).items():
        score = count * total
        if best is None or score > best[1]:
            best = (category_id, score)
    return best


class CategorizationService:
    """Service that decides a category for a transaction."""

    def __init__(
        self,
        db: Database,
        embedding_client: Optional[EmbeddingClient],
        vector_search: Optional[VectorSearchAdapter] = None,
        default_category_id: Optional[int] = None,
        default_category_name: str = DEFAULT_CATEGORY_NAME,
    ):
        """Initialize categorization service.

        Args:
            db: Database instance
            embedding_client: Embedding provider; None skips the vector tier
            vector_search: Neighbour lookup; defaults to one over ``db``
            default_category_id: Pin the default category by ID instead of
                looking it up by name
            default_category_name: Exact name of the default category
        """
        self.db = db
        self.embedding_client = embedding_client
        self.vector_search = vector_search or VectorSearchAdapter(db)
        self.default_category_id = default_category_id
        self.default_category_name = default_category_name

    def categorize(
        self,
        transaction_id: str,
        description: str,
        merchant_name: Optional[str] = None,
        amount: Optional[Decimal | float] = None,
    ) -> CategorizationDecision:
        """Decide a category for one transaction.

        The computed embedding is stored on the transaction; the category is
        not (see ``categorize_transaction``).

        Raises:
            InvalidInput: If the transaction ID or description is missing
        """
        missing = []
        if not transaction_id:
            missing.append("transaction_id")
        if not description or not description.strip():
            missing.append("description")
        if missing:
            raise InvalidInput(missing_categorization_fields(missing))

        query_text = build_query_text(merchant_name, description)

        embedding = self._embed(query_text)
        if embedding is not None:
            self._store_embedding(transaction_id, embedding)
            decision = self._decide_by_neighbours(transaction_id, embedding)
            if decision is not None:
                return decision

        decision = self._decide_by_rules(query_text, amount)
        if decision is not None:
            return decision

        return self._default_decision()

    def categorize_transaction(self, transaction_id: str, apply: bool = True) -> CategorizationDecision:
        """Categorize a stored transaction and optionally write the category.

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidInput: If the stored transaction has no description
            StoreUnavailable: If writing the category fails
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        decision = self.categorize(
            transaction_id=txn.id,
            description=txn.description,
            merchant_name=txn.merchant_name,
            amount=txn.amount,
        )
        if apply and decision.category_id is not None:
            self.db.update_transaction_category(txn.id, decision.category_id)
        return decision

    def recategorize_transactions(
        self, owner_id: Optional[str] = None, uncategorized_only: bool = False
    ) -> BatchCategorizationResult:
        """Categorize stored transactions one by one and write the results.

        A failure on one transaction is counted and does not stop the batch.

        Returns:
            Counts of transactions categorized, skipped (no category decided)
            and failed
        """
        transactions = self.db.list_transactions(owner_id=owner_id, uncategorized=uncategorized_only)
        processed = skipped = errors = 0

        for txn in transactions:
            try:
                decision = self.categorize_transaction(txn.id, apply=True)
            except DomainError as e:
                logger.warning("Could not categorize transaction %s: %s", txn.id, e)
                errors += 1
                continue
            if decision.category_id is None:
                skipped += 1
            else:
                processed += 1

        logger.info(
            "Recategorized %d transactions (%d skipped, %d errors)", processed, skipped, errors
        )
        return BatchCategorizationResult(processed=processed, skipped=skipped, errors=errors)

    def _embed(self, query_text: str) -> Optional[list[float]]:
        if self.embedding_client is None:
            return None
        try:
            return self.embedding_client.embed(query_text)
        except EmbeddingUnavailable as e:
            logger.warning("Embedding unavailable, falling back to rules: %s", e)
            return None

    def _store_embedding(self, transaction_id: str, embedding: list[float]) -> None:
        try:
            self.db.update_transaction_embedding(transaction_id, embedding)
        except DomainError as e:
            logger.error("Error updating transaction %s with embedding: %s", transaction_id, e)

    def _decide_by_neighbours(
        self, transaction_id: str, embedding: list[float]
    ) -> Optional[CategorizationDecision]:
        try:
            neighbours = self.vector_search.search(embedding, exclude_id=transaction_id)
        except StoreUnavailable as e:
            logger.warning("Vector search failed, falling back to rules: %s", e)
            return None
        if not neighbours:
            return None

        winner = pick_category(neighbours)
        if winner is None:
            return None
        category_id, score = winner
        if score <= VOTE_THRESHOLD:
            logger.debug("Vote score %.3f too low for category %s", score, category_id)
            return None

        return CategorizationDecision(
            category_id=category_id,
            confidence=min(score / len(neighbours), 1.0),
            method=METHOD_VECTOR_SEARCH,
            similar_transactions=tuple(neighbours[:MAX_SUPPORTING_TRANSACTIONS]),
        )

    def _decide_by_rules(
        self, query_text: str, amount: Optional[Decimal | float]
    ) -> Optional[CategorizationDecision]:
        try:
            rules = self.db.list_rules(active_only=True)
        except StoreUnavailable as e:
            logger.warning("Could not load categorization rules: %s", e)
            return None

        rule = find_matching_rule(query_text.lower(), amount, rules)
        if rule is None:
            return None
        logger.debug("Rule %s (%s) matched", rule.id, rule.name)
        return CategorizationDecision(
            category_id=rule.category_id, confidence=RULE_CONFIDENCE, method=METHOD_RULES
        )

    def _default_decision(self) -> CategorizationDecision:
        category_id = self.default_category_id
        if category_id is None:
            try:
                category = self.db.get_category_by_name(self.default_category_name)
            except StoreUnavailable as e:
                logger.error("Error getting default category: %s", e)
                category = None
            category_id = category.id if category is not None else None
        return CategorizationDecision(
            category_id=category_id, confidence=DEFAULT_CONFIDENCE, method=METHOD_DEFAULT
        )
