"""Classification commands."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.cli.transaction_files import read_transactions
from deductit.domain.errors import DomainError
from deductit.domain.reconcile import ClassificationService
from deductit.utils.amount_parser import format_amount


@click.command("classify")
@click.argument("descriptions", nargs=-1)
@click.option(
    "--file",
    "transactions_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Reconcile a transactions JSON file written by 'parse --output'",
)
@click.pass_context
def classify(ctx, descriptions: tuple[str, ...], transactions_file: str | None):
    """Classify transaction descriptions or a transactions file.

    Descriptions are classified directly. A transactions file goes through
    the full pipeline: your overrides first, then cached decisions, then the
    classifier.

    Examples:
        deductit classify "SHELL COLES EXPRESS 123" "UBER *TRIP"
        deductit classify --file transactions.json
    """
    if not descriptions and not transactions_file:
        click.echo("Error: Provide descriptions or --file", err=True)
        ctx.exit(1)

    service = ClassificationService(ctx.obj["db"], ctx.obj["user"])
    try:
        if transactions_file:
            classified = service.process(read_transactions(transactions_file))
        else:
            enabled = service.preferences.enabled_categories()
            results = service.classify_batch(list(descriptions), enabled)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if transactions_file:
        click.echo(f"{'Date':<12} {'Merchant':<24} {'Category':<40} {'Amount':>12} {'Deduction':>12}")
        click.echo("-" * 104)
        for txn in classified:
            deduction = format_amount(txn.deduction_amount) if txn.is_business_expense else "-"
            click.echo(
                f"{txn.date.isoformat():<12} {txn.merchant_name[:24]:<24} "
                f"{txn.ato_category[:40]:<40} {format_amount(txn.amount):>12} {deduction:>12}"
            )
        claimed = sum(1 for txn in classified if txn.is_business_expense)
        click.echo(f"\n{claimed} of {len(classified)} transactions are deductible.")
        return

    for description, result in zip(descriptions, results):
        flag = "deductible" if result.is_deductible else "not deductible"
        click.echo(f"{description}")
        click.echo(
            f"  {result.merchant_name} | ANZSIC {result.anzsic_code} | {result.ato_category} | "
            f"{flag} | {result.source.value} ({result.confidence}%)"
        )


def register_commands(cli):
    """Register classify command with main CLI."""
    cli.add_command(classify)
