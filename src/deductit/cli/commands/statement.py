"""Statement parsing commands."""

from pathlib import Path

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.cli.transaction_files import write_transactions
from deductit.domain.errors import DomainError
from deductit.domain.statement import StatementService
from deductit.parsers import SUPPORTED_BANKS
from deductit.utils.amount_parser import format_amount


@click.command("parse")
@click.argument("pdf_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--bank",
    required=True,
    type=click.Choice(SUPPORTED_BANKS, case_sensitive=False),
    help="Bank that issued the statement",
)
@click.option("--year", type=int, help="Statement year, for formats that omit it (Amex, CBA)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write transactions to a JSON file")
@click.pass_context
def parse_statement(ctx, pdf_file: str, bank: str, year: int | None, output: str | None):
    """Parse a bank statement PDF into transactions.

    Examples:
        deductit parse statement.pdf --bank anz
        deductit parse amex.pdf --bank amex --year 2024 -o transactions.json
    """
    path = Path(pdf_file)
    try:
        result = StatementService().process(
            content=path.read_bytes(),
            filename=path.name,
            content_type=None,
            bank=bank,
            statement_year=year,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)

    click.echo(
        f"{result.bank}: {result.transaction_count} transactions from {result.page_count} page(s)\n"
    )
    click.echo(f"{'Date':<12} {'Description':<45} {'Amount':>12}")
    click.echo("-" * 71)
    for txn in result.transactions:
        click.echo(f"{txn.date.isoformat():<12} {txn.description[:45]:<45} {format_amount(txn.amount):>12}")

    if output:
        write_transactions(output, result.transactions)
        click.echo(f"\nWrote {result.transaction_count} transactions to {output}")


def register_commands(cli):
    """Register parse command with main CLI."""
    cli.add_command(parse_statement)
