"""Deduction summary command."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.cli.transaction_files import read_transactions
from deductit.domain.aggregation import SummaryService
from deductit.domain.errors import DomainError
from deductit.domain.reconcile import ClassificationService
from deductit.utils.amount_parser import format_amount
from deductit.utils.date_parser import format_financial_year


@click.command("summary")
@click.argument("transactions_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--fy", "financial_year", help="Financial year, e.g. FY2025 (1 Jul 2024 - 30 Jun 2025)")
@click.pass_context
def summary(ctx, transactions_file: str, financial_year: str | None):
    """Show deductions, estimated tax savings and monthly trends.

    Examples:
        deductit summary transactions.json
        deductit summary transactions.json --fy FY2025
    """
    db = ctx.obj["db"]
    user = ctx.obj["user"]
    try:
        classified = ClassificationService(db, user).process(read_transactions(transactions_file))
        report = SummaryService(db, user).build_dashboard(classified, financial_year=financial_year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    stats = report.stats
    period = format_financial_year(report.financial_year) if report.financial_year else "All transactions"
    click.echo(f"\n{period}")
    click.echo("=" * 50)
    click.echo(f"{'Transactions':<30} {stats.total_transactions:>19}")
    click.echo(f"{'Annual income':<30} {format_amount(stats.total_income):>19}")
    click.echo(f"{'Total expenses':<30} {format_amount(stats.total_expenses):>19}")
    click.echo(f"{'Total deductions':<30} {format_amount(stats.total_deductions):>19}")
    click.echo(f"{'Marginal tax rate':<30} {str(stats.marginal_rate) + '%':>19}")
    click.echo(f"{'Estimated tax savings':<30} {format_amount(stats.tax_savings):>19}")

    if report.category_breakdown:
        click.echo("\nDeductions by category:")
        for item in report.category_breakdown:
            click.echo(f"  {item.category:<42} {format_amount(item.amount):>12} {str(item.percentage) + '%':>7}")

    if report.monthly_trends:
        click.echo("\nMonthly trends:")
        click.echo(f"  {'Month':<10} {'Income':>12} {'Expenses':>12} {'Deductions':>12} {'Savings':>10}")
        for trend in report.monthly_trends:
            click.echo(
                f"  {trend.month:<10} {format_amount(trend.income):>12} {format_amount(trend.expenses):>12} "
                f"{format_amount(trend.deductions):>12} {format_amount(trend.savings):>10}"
            )


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
