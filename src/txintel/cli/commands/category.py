"""Category management commands."""

import click
from txintel.cli.error_handling import handle_domain_error
from txintel.domain.category import CategoryService
from txintel.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    names = {cat.id: cat.name for cat in categories}
    click.echo("\nCategories:")
    for cat in categories:
        parent = f" (under '{names.get(cat.parent_id, '?')}')" if cat.parent_id is not None else ""
        inactive = " [inactive]" if not cat.is_active else ""
        click.echo(f"  {cat.name}{parent} (ID: {cat.id}){inactive}")


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category name")
@click.pass_context
def create_category(ctx, name: str, parent: str | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(name=name, parent_name=parent)
    except DomainError as e:
        handle_domain_error(ctx, e)
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{name}'{parent_str} (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
