"""Duplicate detection and cleanup commands."""

import click
from txintel.cli.error_handling import handle_domain_error
from txintel.domain.cleanup import CleanupService
from txintel.domain.duplicates import DuplicateAnalyzer, build_fingerprint
from txintel.domain.errors import DomainError
from txintel.domain.transaction import TransactionService


@click.group()
def duplicates_group():
    """Find and clean duplicate transactions."""
    pass


@duplicates_group.command("list")
@click.option("--owner", help="Only transactions of this owner")
@click.pass_context
def list_duplicates(ctx, owner: str | None):
    """List duplicate groups, largest first."""
    analyzer = DuplicateAnalyzer(ctx.obj["db"])
    try:
        groups = analyzer.find_duplicate_groups(owner_id=owner)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not groups:
        click.echo("No duplicate transactions found.")
        return

    for group in groups:
        fp = group.fingerprint
        click.echo(
            f"{group.count}x  {fp.date}  {fp.amount:,.2f}  {fp.description}  "
            f"({fp.import_method}, account {fp.account_id})"
        )
        click.echo(f"    keep:   {group.transaction_ids[0]}")
        for txn_id in group.transaction_ids[1:]:
            click.echo(f"    remove: {txn_id}")


@duplicates_group.command("summary")
@click.option("--owner", help="Only transactions of this owner")
@click.pass_context
def summarize_duplicates(ctx, owner: str | None):
    """Summarize duplicates by import method."""
    analyzer = DuplicateAnalyzer(ctx.obj["db"])
    try:
        summaries = analyzer.summarize_by_import_method(owner_id=owner)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not summaries:
        click.echo("No duplicate transactions found.")
        return

    click.echo(f"{'Import method':<20} {'Groups':>8} {'Transactions':>14}")
    for summary in summaries:
        click.echo(
            f"{summary.import_method:<20} {summary.duplicate_groups:>8} "
            f"{summary.total_duplicate_transactions:>14}"
        )


@duplicates_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_duplicates(ctx, transaction_id: str):
    """Show every transaction identical to TRANSACTION_ID, oldest first."""
    db = ctx.obj["db"]
    try:
        txn = TransactionService(db).get_transaction(transaction_id)
        members = DuplicateAnalyzer(db).get_group_details(build_fingerprint(txn))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if len(members) < 2:
        click.echo(f"Transaction {transaction_id} has no duplicates.")
        return

    for index, member in enumerate(members):
        marker = "keep" if index == 0 else "dup "
        click.echo(f"{marker}  {member.id}  created {member.created_at}")


@duplicates_group.command("clean")
@click.option("--owner", help="Only transactions of this owner")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clean_duplicates(ctx, owner: str | None, yes: bool):
    """Delete all but the oldest transaction of each duplicate group."""
    db = ctx.obj["db"]
    if not yes:
        click.confirm("Delete duplicate transactions, keeping the oldest of each group?", abort=True)

    try:
        result = CleanupService(db).clean_duplicates(owner_id=owner)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted {result.deleted_count} duplicate transactions.")
    if result.kept_transaction_ids:
        click.echo(f"Kept: {', '.join(result.kept_transaction_ids)}")
    for key, message in result.failed_groups:
        click.echo(f"✗ {key}: {message}", err=True)
    if result.failed_groups:
        ctx.exit(1)


def register_commands(cli):
    """Register duplicate commands with main CLI."""
    cli.add_command(duplicates_group, name="duplicates")
