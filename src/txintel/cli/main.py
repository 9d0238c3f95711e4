"""Main CLI entry point."""

import click
from txintel.database.factories import create_sqlite_database
from txintel.logging_setup import configure_logging

# Import and register all commands at module level
from txintel.cli.commands import (
    categorize,
    category,
    duplicates,
    init_categories,
    rule,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TXINTEL_DB_PATH environment variable)",
    envvar="TXINTEL_DB_PATH",
)
@click.option(
    "--log-level",
    help="Log level (overrides TXINTEL_LOG_LEVEL environment variable)",
    envvar="TXINTEL_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Txintel - transaction categorization and duplicate cleanup.

    Categorize transactions from similar past transactions and rules, and
    find and remove transactions imported twice.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(log_level)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
categorize.register_commands(cli)
category.register_commands(cli)
duplicates.register_commands(cli)
init_categories.register_commands(cli)
rule.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
