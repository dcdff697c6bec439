"""ANZSIC mapping commands."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.domain.anzsic import AnzsicService
from deductit.domain.categories import resolve_category
from deductit.domain.errors import DomainError


@click.group()
def anzsic_group():
    """Inspect ANZSIC code to ATO category mappings."""
    pass


@anzsic_group.command("lookup")
@click.argument("code")
@click.pass_context
def lookup(ctx, code: str):
    """Show the mapping for an ANZSIC code."""
    try:
        mapping = AnzsicService(ctx.obj["db"]).lookup(code)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if mapping is None:
        click.echo(f"No mapping for ANZSIC code {code}")
        return
    flag = "deductible" if mapping.is_deductible else "not deductible"
    click.echo(f"{mapping.anzsic_code} {mapping.anzsic_description}")
    click.echo(f"  {mapping.ato_category} ({flag}, confidence {mapping.confidence_level}%)")


@anzsic_group.command("list")
@click.option("--deductible", is_flag=True, help="Only deductible mappings")
@click.option("--category", help="Only mappings for this ATO category")
@click.pass_context
def list_mappings(ctx, deductible: bool, category: str | None):
    """List active mappings."""
    try:
        ato_category = resolve_category(category) if category else None
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    mappings = AnzsicService(ctx.obj["db"]).list_mappings(
        deductible_only=deductible, ato_category=ato_category
    )
    if not mappings:
        click.echo("No mappings found. Run 'seed' to load the defaults.")
        return

    for mapping in mappings:
        marker = "*" if mapping.is_deductible else " "
        click.echo(
            f"{marker} {mapping.anzsic_code:<6} {mapping.anzsic_description[:40]:<40} {mapping.ato_category}"
        )


@anzsic_group.command("stats")
@click.pass_context
def stats(ctx):
    """Show mapping statistics."""
    statistics = AnzsicService(ctx.obj["db"]).get_statistics()
    click.echo(f"Active mappings: {statistics.total} ({statistics.deductible} deductible)")
    click.echo(f"Average confidence: {statistics.average_confidence}%")
    for category, counts in sorted(statistics.by_ato_category.items()):
        click.echo(f"  {category:<45} {counts['count']:>4} ({counts['deductible']} deductible)")


def register_commands(cli):
    """Register anzsic commands with main CLI."""
    cli.add_command(anzsic_group, name="anzsic")
