"""Summary and insight commands."""

import click
from envelopes.cli.error_handling import handle_domain_error
from envelopes.domain.errors import DomainError
from envelopes.domain.summary import SummaryService

month_option = click.option("--month", help="Month (YYYY-MM, default: current month)")


def _money(amount) -> str:
    return f"{amount:,.2f}"


@click.group()
def summary_group():
    """Show budget summaries for a month."""
    pass


@summary_group.command("kpis")
@month_option
@click.pass_context
def show_kpis(ctx, month: str | None):
    """Show income, expense and net for a month."""
    service = SummaryService(ctx.obj["store"])
    try:
        kpis = service.kpis(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{kpis['month']} ({kpis['currency_code']})")
    click.echo(f"  Income:         {_money(kpis['income']):>14}")
    click.echo(f"  Expense:        {_money(kpis['expense']):>14}")
    click.echo(f"  Net:            {_money(kpis['net']):>14}")
    click.echo(f"  Transactions:   {kpis['transaction_count']:>14}")
    click.echo(f"  Uncategorized:  {kpis['uncategorized_count']:>14}")
    click.echo(f"  All time:       {kpis['total_transaction_count']:>14}")


@summary_group.command("envelopes")
@month_option
@click.pass_context
def show_envelopes(ctx, month: str | None):
    """Show budgeted, spent and remaining per envelope."""
    service = SummaryService(ctx.obj["store"])
    try:
        summary = service.envelope_summary(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not summary["items"]:
        click.echo("No expense envelopes found. Import a CSV with a category column first.")
        return

    click.echo(f"\nEnvelopes for {summary['month']}:")
    click.echo(f"{'Envelope':<30} {'Budgeted':>12} {'Spent':>12} {'Remaining':>12}")
    click.echo("-" * 69)
    for item in summary["items"]:
        click.echo(
            f"{item['category_name']:<30} {_money(item['budgeted']):>12} "
            f"{_money(item['spent']):>12} {_money(item['remaining']):>12}"
        )
    click.echo(
        f"\nUncategorized transactions: {summary['month_uncategorized_count']} this month, "
        f"{summary['uncategorized_count']} in total"
    )


@summary_group.command("spending")
@month_option
@click.option("--top", "top_n", default=12, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def show_spending(ctx, month: str | None, top_n: int):
    """Show spending by category, highest first."""
    service = SummaryService(ctx.obj["store"])
    try:
        spending = service.spending_by_category(month, top_n=top_n)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not spending["rows"]:
        click.echo(f"No categorized spending in {spending['month']}.")
        return

    click.echo(f"\nSpending by category for {spending['month']}:")
    for row in spending["rows"]:
        click.echo(f"{row['category_name']:<50} {_money(row['total']):>20}")


@summary_group.command("trend")
@month_option
@click.pass_context
def show_trend(ctx, month: str | None):
    """Show daily income and expense."""
    service = SummaryService(ctx.obj["store"])
    try:
        trend = service.spending_trend(month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not trend["rows"]:
        click.echo(f"No transactions in {trend['month']}.")
        return

    click.echo(f"\n{'Day':<12} {'Income':>14} {'Expense':>14}")
    for row in trend["rows"]:
        click.echo(f"{row['day']:<12} {_money(row['income']):>14} {_money(row['expense']):>14}")


@summary_group.command("uncategorized")
@month_option
@click.option("--limit", default=50, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def show_uncategorized(ctx, month: str | None, limit: int):
    """List transactions without an envelope."""
    service = SummaryService(ctx.obj["store"])
    try:
        result = service.uncategorized_transactions(month, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result["transactions"]:
        click.echo(f"No uncategorized transactions in {result['month']}.")
        return

    for tx in result["transactions"]:
        label = tx["merchant"] or tx["description"]
        click.echo(
            f"{tx['transaction_id']}  {tx['date']}  {tx['account']:<20} "
            f"{label:<30} {_money(tx['amount']):>12} {tx['currency_code']}"
        )


@summary_group.command("transactions")
@month_option
@click.option("--query", "-q", help="Match account, merchant or description")
@click.option("--uncategorized", "only_uncategorized", is_flag=True, help="Only uncategorized transactions")
@click.option("--limit", default=200, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def show_transactions(
    ctx, month: str | None, query: str | None, only_uncategorized: bool, limit: int
):
    """List a month's transactions with their envelope, newest first."""
    service = SummaryService(ctx.obj["store"])
    try:
        result = service.list_transactions(
            month, query=query, only_uncategorized=only_uncategorized, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    transactions = result["transactions"]
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s) in {result['month']}:")
    click.echo("-" * 100)
    click.echo(
        f"{'Date':<12} {'Amount':>12} {'Account':<20} {'Category':<20} {'Description':<30}"
    )
    click.echo("-" * 100)
    for tx in transactions:
        category = tx["category_name"] or "Uncategorized"
        description = (tx["description"] or tx["merchant"])[:30]
        click.echo(
            f"{tx['date']:<12} {_money(tx['amount']):>12} {tx['account'][:20]:<20} "
            f"{category[:20]:<20} {description:<30}"
        )


@summary_group.command("months")
@click.pass_context
def show_months(ctx):
    """List months that have transactions."""
    months = SummaryService(ctx.obj["store"]).list_available_months()
    if not months:
        click.echo("No transactions found.")
        return
    for month in months:
        click.echo(month)


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
