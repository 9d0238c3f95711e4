"""Transaction management commands."""

import click
from txintel.cli.error_handling import handle_domain_error
from txintel.domain.category import CategoryService
from txintel.domain.errors import DomainError
from txintel.domain.transaction import TransactionService
from txintel.utils.date_parser import parse_date
from txintel.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--owner", required=True, help="Owner ID")
@click.option("--account", required=True, help="Account ID")
@click.option("--date", "date_str", required=True, help="Transaction date (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--amount", "amount_str", required=True, help="Transaction amount (e.g., -5.75)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--merchant", help="Merchant name")
@click.option("--import-method", default="manual", show_default=True, help="How the transaction arrived")
@click.option("--source-file", help="Imported file name")
@click.option("--category", help="Category name")
@click.option("--allow-duplicate", is_flag=True, help="Insert even if an identical transaction exists")
@click.pass_context
def add_transaction(
    ctx,
    owner: str,
    account: str,
    date_str: str,
    amount_str: str,
    description: str,
    merchant: str | None,
    import_method: str,
    source_file: str | None,
    category: str | None,
    allow_duplicate: bool,
):
    """Add a transaction.

    Examples:
        txintel transaction add --owner u1 --account a1 --date 2024-01-15 --amount -5.75 --description "coffee purchase" --merchant Starbucks
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn_date = parse_date(date_str)
        txn_amount = parse_amount(amount_str)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        category_id = None
        if category:
            category_id = CategoryService(db).require_category_by_name(category).id
        transaction_id = service.create_transaction(
            owner_id=owner,
            account_id=account,
            date=txn_date,
            amount=txn_amount,
            description=description,
            import_method=import_method,
            source_file=source_file,
            merchant_name=merchant,
            category_id=category_id,
            allow_duplicate=allow_duplicate,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {txn_amount:,.2f}")
    click.echo(f"  Description: {description}")


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a transaction."""
    db = ctx.obj["db"]
    try:
        txn = TransactionService(db).get_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    names = CategoryService(db).category_names()
    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Owner: {txn.owner_id}")
    click.echo(f"  Account: {txn.account_id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Description: {txn.description}")
    if txn.merchant_name:
        click.echo(f"  Merchant: {txn.merchant_name}")
    click.echo(f"  Import method: {txn.import_method}")
    if txn.source_file:
        click.echo(f"  Source file: {txn.source_file}")
    category = names.get(txn.category_id, "Unknown") if txn.category_id is not None else "Uncategorized"
    click.echo(f"  Category: {category}")
    click.echo(f"  Created: {txn.created_at}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
