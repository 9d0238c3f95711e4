"""Automatic categorization commands."""

import click
from txintel.cli.error_handling import handle_domain_error
from txintel.domain.categorization import CategorizationService
from txintel.domain.category import CategoryService
from txintel.domain.errors import DomainError, EmbeddingUnavailable
from txintel.embeddings.factories import create_openai_embedding_client


def _build_service(db) -> CategorizationService:
    """Create the pipeline, running without the vector tier when embeddings are not configured."""
    try:
        embedding_client = create_openai_embedding_client()
    except EmbeddingUnavailable as e:
        click.echo(f"Warning: {e}; using rules only", err=True)
        embedding_client = None
    return CategorizationService(db, embedding_client)


@click.command("categorize")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.option("--apply", is_flag=True, help="Write the decided category to each transaction")
@click.pass_context
def categorize_transactions(ctx, transaction_ids: tuple[str, ...], apply: bool):
    """Suggest (and optionally apply) a category for one or more transactions.

    Examples:
        txintel categorize 3f2b... --apply
    """
    db = ctx.obj["db"]
    service = _build_service(db)
    names = CategoryService(db).category_names()

    # Remove duplicates while preserving order
    unique_ids = list(dict.fromkeys(transaction_ids))
    errors = []

    for txn_id in unique_ids:
        try:
            decision = service.categorize_transaction(txn_id, apply=apply)
        except DomainError as e:
            errors.append((txn_id, str(e)))
            click.echo(f"✗ Transaction {txn_id}: {e}")
            continue

        category = names.get(decision.category_id, "none") if decision.category_id is not None else "none"
        action = "categorized as" if apply and decision.category_id is not None else "suggested"
        click.echo(
            f"✓ Transaction {txn_id} {action} '{category}' "
            f"({decision.method}, confidence {decision.confidence:.2f})"
        )
        for similar in decision.similar_transactions:
            click.echo(
                f"    {similar.similarity:.3f}  {similar.text}  [{similar.category_name or 'uncategorized'}]"
            )

    if len(unique_ids) > 1:
        click.echo(f"\nResults: {len(unique_ids) - len(errors)} succeeded, {len(errors)} failed")
    if errors:
        ctx.exit(1)


@click.command("recategorize")
@click.option("--owner", help="Only transactions of this owner")
@click.option("--uncategorized", is_flag=True, help="Only transactions without a category")
@click.pass_context
def recategorize(ctx, owner: str | None, uncategorized: bool):
    """Re-run categorization over stored transactions and write the results."""
    db = ctx.obj["db"]
    service = _build_service(db)

    try:
        result = service.recategorize_transactions(owner_id=owner, uncategorized_only=uncategorized)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Categorized {result.processed} transactions "
        f"({result.skipped} without a category, {result.errors} errors)"
    )
    if result.errors:
        ctx.exit(1)


def register_commands(cli):
    """Register categorization commands with main CLI."""
    cli.add_command(categorize_transactions)
    cli.add_command(recategorize)
