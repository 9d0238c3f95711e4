"""Categorization rule commands."""

import click
from txintel.cli.error_handling import handle_domain_error
from txintel.domain.category import CategoryService
from txintel.domain.entities import (
    RULE_TYPE_AMOUNT_RANGE,
    RULE_TYPE_KEYWORD,
    RULE_TYPE_MERCHANT,
    RULE_TYPES,
)
from txintel.domain.errors import DomainError
from txintel.domain.rules import RuleService


def _describe_conditions(rule_type: str, conditions: dict) -> str:
    if rule_type == RULE_TYPE_KEYWORD:
        return "keywords: " + ", ".join(conditions.get("keywords", []))
    if rule_type == RULE_TYPE_MERCHANT:
        return "merchants: " + ", ".join(conditions.get("merchants", []))
    if rule_type == RULE_TYPE_AMOUNT_RANGE:
        low = conditions.get("min_amount", 0)
        high = conditions.get("max_amount")
        return f"amount: {low} to {high if high is not None else 'any'}"
    return str(conditions)


@click.group()
def rule_group():
    """Manage categorization rules."""
    pass


@rule_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include disabled rules")
@click.pass_context
def list_rules(ctx, show_all: bool):
    """List rules in evaluation order (highest priority first)."""
    db = ctx.obj["db"]
    service = RuleService(db)
    names = CategoryService(db).category_names()

    rules = service.list_rules(active_only=not show_all)
    if not rules:
        click.echo("No rules found.")
        return

    for rule in rules:
        status = "" if rule.is_active else " [disabled]"
        click.echo(
            f"{rule.id}: {rule.name} (priority {rule.priority}, {rule.rule_type}) "
            f"-> {names.get(rule.category_id, 'Unknown')}{status}"
        )
        click.echo(f"    {_describe_conditions(rule.rule_type, rule.conditions)}")


@rule_group.command("add")
@click.argument("name")
@click.option("--category", required=True, help="Category name assigned on match")
@click.option(
    "--type",
    "rule_type",
    type=click.Choice(list(RULE_TYPES)),
    default=RULE_TYPE_KEYWORD,
    show_default=True,
    help="Rule type",
)
@click.option("--keyword", "keywords", multiple=True, help="Keyword to match (repeatable)")
@click.option("--merchant", "merchants", multiple=True, help="Merchant to match (repeatable)")
@click.option("--min", "min_amount", type=float, help="Minimum absolute amount")
@click.option("--max", "max_amount", type=float, help="Maximum absolute amount")
@click.option("--priority", type=int, default=0, show_default=True, help="Higher runs first")
@click.pass_context
def add_rule(
    ctx,
    name: str,
    category: str,
    rule_type: str,
    keywords: tuple[str, ...],
    merchants: tuple[str, ...],
    min_amount: float | None,
    max_amount: float | None,
    priority: int,
):
    """Add a categorization rule.

    Examples:
        txintel rule add "Rideshare" --category Transport --keyword uber --keyword lyft --priority 10
        txintel rule add "Small" --category Other --type amount_range --max 100
    """
    db = ctx.obj["db"]
    service = RuleService(db)

    if rule_type == RULE_TYPE_KEYWORD:
        conditions = {"keywords": list(keywords)}
    elif rule_type == RULE_TYPE_MERCHANT:
        conditions = {"merchants": list(merchants)}
    else:
        conditions = {"min_amount": min_amount, "max_amount": max_amount}

    try:
        category_id = CategoryService(db).require_category_by_name(category).id
        rule_id = service.create_rule(
            name=name,
            rule_type=rule_type,
            category_id=category_id,
            conditions=conditions,
            priority=priority,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created rule '{name}' (ID: {rule_id})")


def _set_active(ctx, rule_id: int, is_active: bool) -> None:
    try:
        RuleService(ctx.obj["db"]).set_active(rule_id, is_active)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rule {rule_id} {'enabled' if is_active else 'disabled'}")


@rule_group.command("enable")
@click.argument("rule_id", type=int)
@click.pass_context
def enable_rule(ctx, rule_id: int):
    """Enable a rule."""
    _set_active(ctx, rule_id, True)


@rule_group.command("disable")
@click.argument("rule_id", type=int)
@click.pass_context
def disable_rule(ctx, rule_id: int):
    """Disable a rule."""
    _set_active(ctx, rule_id, False)


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule."""
    try:
        RuleService(ctx.obj["db"]).delete_rule(rule_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted rule {rule_id}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
