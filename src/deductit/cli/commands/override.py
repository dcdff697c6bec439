"""Per-transaction override commands."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.domain.errors import DomainError
from deductit.domain.preferences import PreferenceService


@click.group()
def override_group():
    """Override how individual transactions are classified."""
    pass


@override_group.command("set")
@click.argument("transaction_id")
@click.option("--deductible/--not-deductible", default=True, help="Whether the transaction is deductible")
@click.pass_context
def set_override(ctx, transaction_id: str, deductible: bool):
    """Mark a transaction deductible or not deductible."""
    try:
        PreferenceService(ctx.obj["db"], ctx.obj["user"]).set_manual_override(transaction_id, deductible)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    flag = "deductible" if deductible else "not deductible"
    click.echo(f"Transaction {transaction_id} marked {flag}")


@override_group.command("category")
@click.argument("transaction_id")
@click.argument("category")
@click.pass_context
def set_category(ctx, transaction_id: str, category: str):
    """Claim a transaction under a deduction category."""
    try:
        PreferenceService(ctx.obj["db"], ctx.obj["user"]).set_category_override(transaction_id, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Transaction {transaction_id} claimed under '{category}'")


@override_group.command("clear")
@click.argument("transaction_id")
@click.pass_context
def clear_override(ctx, transaction_id: str):
    """Remove overrides so the classifier decides again."""
    if PreferenceService(ctx.obj["db"], ctx.obj["user"]).clear_override(transaction_id):
        click.echo(f"Cleared overrides for transaction {transaction_id}")
    else:
        click.echo(f"No overrides for transaction {transaction_id}")


@override_group.command("list")
@click.pass_context
def list_overrides(ctx):
    """List all overrides."""
    preferences = PreferenceService(ctx.obj["db"], ctx.obj["user"])
    manual = preferences.get_manual_overrides()
    categories = preferences.get_category_overrides()
    if not manual and not categories:
        click.echo("No overrides set.")
        return

    for transaction_id in sorted(set(manual) | set(categories)):
        if transaction_id in categories:
            decision = categories[transaction_id]
        else:
            decision = "deductible" if manual[transaction_id] else "not deductible"
        click.echo(f"{transaction_id:<40} {decision}")


def register_commands(cli):
    """Register override commands with main CLI."""
    cli.add_command(override_group, name="override")
