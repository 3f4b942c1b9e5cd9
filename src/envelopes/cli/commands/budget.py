"""Envelope budget and categorization commands."""

from decimal import Decimal, InvalidOperation

import click
from envelopes.cli.error_handling import handle_domain_error
from envelopes.domain.budget import BudgetService
from envelopes.domain.errors import DomainError
from envelopes.utils.date_parser import current_month


@click.group()
def budget_group():
    """Manage monthly envelope budgets."""
    pass


@budget_group.command("set")
@click.argument("category")
@click.argument("amount")
@click.option("--month", help="Month (YYYY-MM, default: current month)")
@click.pass_context
def set_budget(ctx, category: str, amount: str, month: str | None):
    """Set the budget of an envelope for a month.

    Examples:
        envelopes budget set Groceries 400
        envelopes budget set "Eating Out" 150 --month 2024-03
    """
    service = BudgetService(ctx.obj["store"])
    month = month or current_month()

    try:
        value = Decimal(amount)
        if not value.is_finite():
            raise InvalidOperation(amount)
    except InvalidOperation:
        click.echo(f"Error: Invalid amount '{amount}'", err=True)
        ctx.exit(1)

    try:
        row = service.set_envelope_budget(month=month, category_name=category, amount=value)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Budget for '{row.name}' in {month} set to {row.budgeted_amount:,.2f}")


@click.command("categorize")
@click.argument("transaction_id")
@click.argument("category")
@click.pass_context
def categorize_transaction(ctx, transaction_id: str, category: str):
    """Assign a transaction to an envelope for its full amount.

    Example:
        envelopes categorize 3f2c9a1e-... Groceries
    """
    service = BudgetService(ctx.obj["store"])
    try:
        assigned = service.categorize_transaction(transaction_id, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} categorized as '{assigned.name}'")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
    cli.add_command(categorize_transaction)
