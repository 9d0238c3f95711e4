"""Shared pytest fixtures for txintel tests."""

import tempfile
import os
from datetime import date, datetime
from decimal import Decimal
import pytest

from txintel.database.factories import create_sqlite_database
from txintel.domain.category import CategoryService
from txintel.domain.errors import EmbeddingUnavailable, StoreUnavailable
from txintel.domain.rules import RuleService
from txintel.domain.transaction import TransactionService
from txintel.embeddings.base import EmbeddingClient


class FakeEmbeddingClient(EmbeddingClient):
    """Embedding client returning canned vectors.

    The first key of ``vectors`` found (case-insensitively) in the text
    decides the vector; otherwise ``default`` is returned.
    """

    def __init__(self, vectors=None, default=None, error=None):
        self.vectors = vectors or {}
        self.default = default if default is not None else [0.0, 0.0, 1.0]
        self.error = error
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise EmbeddingUnavailable(self.error)
        lowered = text.lower()
        for key, vector in self.vectors.items():
            if key.lower() in lowered:
                return list(vector)
        return list(self.default)


class FailingDatabase:
    """Wraps a database and fails selected operations with StoreUnavailable.

    ``failures`` maps an operation name to how many calls should fail;
    None fails every call.
    """

    def __init__(self, db, failures):
        self._db = db
        self._failures = dict(failures)

    def __getattr__(self, name):
        attr = getattr(self._db, name)
        if name not in self._failures:
            return attr

        def failing(*args, **kwargs):
            remaining = self._failures[name]
            if remaining is None or remaining > 0:
                if remaining is not None:
                    self._failures[name] = remaining - 1
                raise StoreUnavailable(f"Store operation '{name}' failed: simulated outage")
            return attr(*args, **kwargs)

        return failing


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path, timeout=5)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a RuleService with a temporary database."""
    return RuleService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_categories(category_service):
    """Initialize the default categories and return name -> ID."""
    from txintel.cli.commands.init_categories import INITIAL_CATEGORIES

    category_ids = {}
    for category_name, parent_name in INITIAL_CATEGORIES:
        category_ids[category_name] = category_service.create_category(
            name=category_name, parent_name=parent_name
        )
    return category_ids


@pytest.fixture
def make_transaction(temp_db):
    """Factory storing a transaction with sensible defaults; returns its ID."""

    def _make(**overrides):
        fields = {
            "owner_id": "user-1",
            "account_id": "acct-1",
            "date": date(2024, 1, 15),
            "amount": Decimal("-5.75"),
            "description": "coffee purchase",
            "import_method": "manual",
            "source_file": None,
            "merchant_name": None,
            "category_id": None,
            "created_at": datetime(2024, 1, 15, 9, 0, 0),
        }
        fields.update(overrides)
        return temp_db.create_transaction(**fields)

    return _make


@pytest.fixture
def failing_db(temp_db):
    """Factory wrapping the temporary database with simulated store failures."""

    def _wrap(**failures):
        return FailingDatabase(temp_db, failures)

    return _wrap


@pytest.fixture
def fake_embeddings():
    """Factory for canned embedding clients."""
    return FakeEmbeddingClient


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
