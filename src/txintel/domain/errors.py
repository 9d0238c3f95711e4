"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidInput(ValidationError):
    """A categorization request is missing required fields."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as inserting a duplicate transaction."""


class EmbeddingUnavailable(DomainError):
    """The embedding provider failed, timed out or returned malformed output."""


class StoreUnavailable(DomainError):
    """The persistent store failed to complete an operation."""


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing categorization rule."""
    return f"Rule {rule_id} not found"


def duplicate_transaction(existing_id: str) -> str:
    """Return message when a transaction with the same fingerprint exists."""
    return f"An identical transaction already exists (ID: {existing_id})"


def missing_categorization_fields(missing: list[str]) -> str:
    """Return message for a categorization request lacking required fields."""
    return f"Missing required fields: {', '.join(missing)}"


def store_failure(operation: str, error: Exception) -> str:
    """Return message for a failed store operation."""
    return f"Store operation '{operation}' failed: {error}"
