"""Initialize default categories."""

import click
from txintel.domain.category import CategoryService
from txintel.domain.errors import DomainError


# Initial categories; "Other" is the categorization fallback
INITIAL_CATEGORIES = [
    ("Income", None),
    ("Food & Dining", None),
    ("Transport", None),
    ("Shopping", None),
    ("Bills & Utilities", None),
    ("Entertainment", None),
    ("Health & Fitness", None),
    ("Travel", None),
    ("Transfer", None),
    ("Other", None),
    ("Salary", "Income"),
    ("Groceries", "Food & Dining"),
    ("Restaurants", "Food & Dining"),
    ("Coffee & Snacks", "Food & Dining"),
    ("Rideshare", "Transport"),
    ("Public Transit", "Transport"),
    ("Gas", "Transport"),
    ("Subscriptions", "Bills & Utilities"),
]


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default category set."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    if service.list_categories():
        click.echo("Categories already exist. Skipping initialization.")
        return

    created = 0
    errors = 0
    # Parents precede their children in INITIAL_CATEGORIES
    for category_name, parent_name in INITIAL_CATEGORIES:
        try:
            service.create_category(name=category_name, parent_name=parent_name)
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create category '{category_name}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} categories.")
    else:
        click.echo(f"Created {created} categories with {errors} errors.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
