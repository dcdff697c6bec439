"""Annual income command."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.domain.aggregation import marginal_tax_rate
from deductit.domain.errors import DomainError
from deductit.domain.preferences import PreferenceService
from deductit.utils.amount_parser import format_amount, parse_amount


@click.command("income")
@click.argument("amount", required=False)
@click.pass_context
def income(ctx, amount: str | None):
    """Show or set your annual income, which sets the marginal tax rate.

    Examples:
        deductit income
        deductit income 95000
    """
    preferences = PreferenceService(ctx.obj["db"], ctx.obj["user"])
    if amount is not None:
        try:
            preferences.set_annual_income(parse_amount(amount))
        except DomainError as e:
            handle_domain_error(ctx, e)
            return
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    value = preferences.get_annual_income()
    click.echo(f"Annual income: {format_amount(value)} (marginal rate {marginal_tax_rate(value)}%)")


def register_commands(cli):
    """Register income command with main CLI."""
    cli.add_command(income)
