"""Tests for the categorization pipeline."""

from decimal import Decimal

import pytest

from txintel.domain.categorization import (
    CategorizationService,
    build_query_text,
    pick_category,
    tally_votes,
)
from txintel.domain.entities import SimilarTransaction
from txintel.domain.errors import InvalidInput, NotFoundError

COFFEE = [1.0, 0.0, 0.0]


def _neighbour(make_transaction, temp_db, vector, category_id=None, description="coffee purchase"):
    txn_id = make_transaction(description=description, category_id=category_id)
    temp_db.update_transaction_embedding(txn_id, vector)
    return txn_id


def _similar(txn_id, category_id, similarity):
    return SimilarTransaction(
        id=txn_id, text="t", category_id=category_id, category_name=None, similarity=similarity
    )


def test_build_query_text():
    assert build_query_text("Starbucks", "coffee purchase") == "Starbucks coffee purchase"
    assert build_query_text(None, "coffee purchase") == " coffee purchase"
    assert build_query_text("  Uber ", "trip") == "Uber trip"


def test_tally_votes_skips_uncategorized():
    votes = tally_votes([_similar("a", 1, 0.9), _similar("b", None, 0.95), _similar("c", 1, 0.8)])
    assert list(votes) == [1]
    count, total = votes[1]
    assert count == 2
    assert total == pytest.approx(1.7)


def test_pick_category_weights_count_and_similarity():
    neighbours = [_similar("a", 2, 0.99), _similar("b", 1, 0.75), _similar("c", 1, 0.75)]
    category_id, score = pick_category(neighbours)
    assert category_id == 1
    assert score == pytest.approx(3.0)


def test_pick_category_tie_goes_to_first_seen():
    neighbours = [_similar("a", 5, 0.8), _similar("b", 3, 0.8)]
    assert pick_category(neighbours)[0] == 5


def test_pick_category_without_votes():
    assert pick_category([_similar("a", None, 0.9)]) is None
    assert pick_category([]) is None


def test_default_when_nothing_matches(temp_db, sample_categories, make_transaction, fake_embeddings):
    """A first-ever coffee purchase with no rules lands in Other."""
    txn_id = make_transaction(merchant_name="Starbucks")
    service = CategorizationService(temp_db, fake_embeddings({"starbucks": COFFEE}))

    decision = service.categorize(txn_id, "coffee purchase", "Starbucks", Decimal("-5.75"))

    assert decision.category_id == sample_categories["Other"]
    assert decision.confidence == pytest.approx(0.1)
    assert decision.method == "default"
    assert decision.similar_transactions == ()


def test_query_text_is_embedded(temp_db, sample_categories, make_transaction, fake_embeddings):
    client = fake_embeddings()
    service = CategorizationService(temp_db, client)
    txn_id = make_transaction()

    service.categorize(txn_id, "coffee purchase", "Starbucks")
    service.categorize(txn_id, "coffee purchase")

    assert client.calls == ["Starbucks coffee purchase", " coffee purchase"]


def test_embedding_is_stored_on_transaction(temp_db, sample_categories, make_transaction, fake_embeddings):
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings({"starbucks": COFFEE}))

    service.categorize(txn_id, "coffee purchase", "Starbucks")

    assert temp_db.get_transaction(txn_id).embedding == (1.0, 0.0, 0.0)


def test_vector_vote_decides(temp_db, sample_categories, make_transaction, fake_embeddings):
    coffee = sample_categories["Coffee & Snacks"]
    for _ in range(3):
        _neighbour(make_transaction, temp_db, COFFEE, coffee)
    txn_id = make_transaction(merchant_name="Starbucks")
    service = CategorizationService(temp_db, fake_embeddings({"starbucks": COFFEE}))

    decision = service.categorize(txn_id, "coffee purchase", "Starbucks", Decimal("-5.75"))

    assert decision.method == "vector_search"
    assert decision.category_id == coffee
    assert decision.confidence == pytest.approx(1.0)
    assert len(decision.similar_transactions) == 3
    assert all(s.similarity == pytest.approx(1.0) for s in decision.similar_transactions)
    assert all(s.category_name == "Coffee & Snacks" for s in decision.similar_transactions)
    assert txn_id not in {s.id for s in decision.similar_transactions}


def test_vector_vote_prefers_frequent_over_single_closest(
    temp_db, sample_categories, make_transaction, fake_embeddings
):
    coffee = sample_categories["Coffee & Snacks"]
    restaurants = sample_categories["Restaurants"]
    _neighbour(make_transaction, temp_db, [0.75, 0.6614378277661477, 0.0], coffee)
    _neighbour(make_transaction, temp_db, [0.75, 0.6614378277661477, 0.0], coffee)
    closest = _neighbour(make_transaction, temp_db, [0.99, 0.1410673597966588, 0.0], restaurants)
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "vector_search"
    assert decision.category_id == coffee
    assert decision.similar_transactions[0].id == closest
    assert 0 < decision.confidence <= 1


def test_vector_confidence_divides_by_neighbour_count(
    temp_db, sample_categories, make_transaction, fake_embeddings
):
    coffee = sample_categories["Coffee & Snacks"]
    _neighbour(make_transaction, temp_db, [0.8, 0.6, 0.0], coffee)
    for _ in range(3):
        _neighbour(make_transaction, temp_db, COFFEE)
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.category_id == coffee
    assert decision.confidence == pytest.approx(0.8 / 4)
    assert len(decision.similar_transactions) == 4
    assert decision.similar_transactions[-1].category_id == coffee


def test_at_most_five_supporting_transactions(temp_db, sample_categories, make_transaction, fake_embeddings):
    coffee = sample_categories["Coffee & Snacks"]
    for _ in range(7):
        _neighbour(make_transaction, temp_db, COFFEE, coffee)
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "vector_search"
    assert len(decision.similar_transactions) == 5


def test_distant_neighbours_are_ignored(temp_db, sample_categories, make_transaction, fake_embeddings):
    _neighbour(make_transaction, temp_db, [0.6, 0.8, 0.0], sample_categories["Restaurants"])
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "default"


def test_uncategorized_neighbours_fall_through_to_rules(
    temp_db, sample_categories, rule_service, make_transaction, fake_embeddings
):
    for _ in range(3):
        _neighbour(make_transaction, temp_db, COFFEE)
    rule_service.create_rule(
        "Coffee", "merchant", sample_categories["Coffee & Snacks"], {"merchants": ["starbucks"]}
    )
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase", "Starbucks")

    assert decision.method == "rules"
    assert decision.category_id == sample_categories["Coffee & Snacks"]


def test_transaction_is_not_its_own_neighbour(temp_db, sample_categories, make_transaction, fake_embeddings):
    txn_id = _neighbour(make_transaction, temp_db, COFFEE, sample_categories["Transport"])
    service = CategorizationService(temp_db, fake_embeddings(default=COFFEE))

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "default"


def test_rule_priority_decides(temp_db, sample_categories, rule_service, make_transaction, fake_embeddings):
    """An uber ride matching a keyword rule and an amount rule uses the higher priority."""
    rule_service.create_rule(
        "Rideshare", "keyword", sample_categories["Transport"], {"keywords": ["uber"]}, priority=10
    )
    rule_service.create_rule(
        "Small", "amount_range", sample_categories["Shopping"], {"min_amount": 0, "max_amount": 100}, priority=1
    )
    txn_id = make_transaction(description="uber trip")
    service = CategorizationService(temp_db, fake_embeddings())

    decision = service.categorize(txn_id, "uber trip", amount=Decimal("-23.40"))

    assert decision.method == "rules"
    assert decision.category_id == sample_categories["Transport"]
    assert decision.confidence == pytest.approx(0.7)


def test_embedding_failure_degrades_to_rules(temp_db, sample_categories, rule_service, make_transaction, fake_embeddings):
    rule_service.create_rule("Rideshare", "keyword", sample_categories["Transport"], {"keywords": ["uber"]})
    txn_id = make_transaction(description="uber trip")
    service = CategorizationService(temp_db, fake_embeddings(error="request timed out"))

    decision = service.categorize(txn_id, "UBER TRIP")

    assert decision.method == "rules"
    assert decision.category_id == sample_categories["Transport"]
    assert temp_db.get_transaction(txn_id).embedding is None


def test_without_embedding_client_uses_rules(temp_db, sample_categories, rule_service, make_transaction):
    rule_service.create_rule("Rideshare", "keyword", sample_categories["Transport"], {"keywords": ["uber"]})
    txn_id = make_transaction(description="uber trip")
    service = CategorizationService(temp_db, None)

    assert service.categorize(txn_id, "uber trip").method == "rules"


def test_vector_search_failure_degrades_to_rules(
    temp_db, sample_categories, rule_service, make_transaction, fake_embeddings, failing_db
):
    rule_service.create_rule("Rideshare", "keyword", sample_categories["Transport"], {"keywords": ["uber"]})
    txn_id = make_transaction(description="uber trip")
    service = CategorizationService(failing_db(find_similar_transactions=None), fake_embeddings())

    decision = service.categorize(txn_id, "uber trip")

    assert decision.method == "rules"
    assert decision.category_id == sample_categories["Transport"]


def test_rule_store_failure_degrades_to_default(
    temp_db, sample_categories, rule_service, make_transaction, failing_db
):
    rule_service.create_rule("Rideshare", "keyword", sample_categories["Transport"], {"keywords": ["uber"]})
    txn_id = make_transaction(description="uber trip")
    service = CategorizationService(failing_db(list_rules=None), None)

    decision = service.categorize(txn_id, "uber trip")

    assert decision.method == "default"
    assert decision.category_id == sample_categories["Other"]


def test_total_store_outage_still_returns_decision(
    temp_db, sample_categories, make_transaction, fake_embeddings, failing_db
):
    txn_id = make_transaction()
    db = failing_db(
        update_transaction_embedding=None,
        find_similar_transactions=None,
        list_rules=None,
        get_category_by_name=None,
    )
    service = CategorizationService(db, fake_embeddings())

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "default"
    assert decision.category_id is None
    assert decision.confidence == pytest.approx(0.1)


def test_unknown_transaction_still_categorized(temp_db, sample_categories, fake_embeddings):
    service = CategorizationService(temp_db, fake_embeddings())

    decision = service.categorize("not-stored", "coffee purchase")

    assert decision.method == "default"
    assert decision.category_id == sample_categories["Other"]


def test_default_without_other_category(temp_db, make_transaction, fake_embeddings):
    txn_id = make_transaction()
    service = CategorizationService(temp_db, fake_embeddings())

    decision = service.categorize(txn_id, "coffee purchase")

    assert decision.method == "default"
    assert decision.category_id is None


def test_pinned_default_category(temp_db, sample_categories, make_transaction):
    txn_id = make_transaction()
    service = CategorizationService(temp_db, None, default_category_id=sample_categories["Shopping"])

    assert service.categorize(txn_id, "coffee purchase").category_id == sample_categories["Shopping"]


@pytest.mark.parametrize(
    "transaction_id,description",
    [("", "coffee purchase"), ("txn-1", ""), ("txn-1", "   "), ("txn-1", None)],
)
def test_missing_fields_raise_invalid_input(temp_db, transaction_id, description):
    service = CategorizationService(temp_db, None)
    with pytest.raises(InvalidInput):
        service.categorize(transaction_id, description)


def test_categorize_transaction_applies_category(
    temp_db, sample_categories, make_transaction, fake_embeddings
):
    coffee = sample_categories["Coffee & Snacks"]
    for _ in range(2):
        _neighbour(make_transaction, temp_db, COFFEE, coffee)
    txn_id = make_transaction(merchant_name="Starbucks")
    service = CategorizationService(temp_db, fake_embeddings({"starbucks": COFFEE}))

    suggestion = service.categorize_transaction(txn_id, apply=False)
    assert suggestion.category_id == coffee
    assert temp_db.get_transaction(txn_id).category_id is None

    service.categorize_transaction(txn_id)
    assert temp_db.get_transaction(txn_id).category_id == coffee


def test_categorize_missing_transaction(temp_db):
    service = CategorizationService(temp_db, None)
    with pytest.raises(NotFoundError):
        service.categorize_transaction("missing")


def test_recategorize_counts_outcomes(temp_db, category_service, rule_service, make_transaction):
    transport = category_service.create_category("Transport")
    rule_service.create_rule("Rideshare", "keyword", transport, {"keywords": ["uber"]})
    first = make_transaction(description="uber trip")
    second = make_transaction(description="uber home", amount=Decimal("-18.00"))
    make_transaction(description="grocery run")
    make_transaction(description="   ")
    service = CategorizationService(temp_db, None)

    result = service.recategorize_transactions()

    assert result.processed == 2
    assert result.skipped == 1
    assert result.errors == 1
    assert temp_db.get_transaction(first).category_id == transport
    assert temp_db.get_transaction(second).category_id == transport


def test_recategorize_uncategorized_only(temp_db, category_service, rule_service, make_transaction):
    transport = category_service.create_category("Transport")
    shopping = category_service.create_category("Shopping")
    rule_service.create_rule("Rideshare", "keyword", transport, {"keywords": ["uber"]})
    done = make_transaction(description="uber trip", category_id=shopping)
    make_transaction(description="uber home")
    service = CategorizationService(temp_db, None)

    result = service.recategorize_transactions(uncategorized_only=True)

    assert result.processed == 1
    assert temp_db.get_transaction(done).category_id == shopping
