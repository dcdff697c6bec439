"""Merchant reference table commands."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.domain.errors import DomainError
from deductit.domain.merchant import MerchantService


@click.group()
def merchant_group():
    """Manage known merchants."""
    pass


@merchant_group.command("add")
@click.argument("name")
@click.option("--anzsic-code", required=True, help="ANZSIC industry code, e.g. 4613")
@click.option("--display-name", help="Display name (default: NAME as given)")
@click.option("--keyword", "keywords", multiple=True, help="Lookup keyword (repeatable)")
@click.option("--alias", "aliases", multiple=True, help="Alternative name (repeatable)")
@click.pass_context
def add_merchant(ctx, name: str, anzsic_code: str, display_name: str | None, keywords, aliases):
    """Add a merchant so the classifier recognizes it."""
    service = MerchantService(ctx.obj["db"])
    try:
        merchant = service.create_merchant(
            name,
            anzsic_code,
            display=display_name,
            keywords=list(keywords) or [name],
            aliases=list(aliases),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Merchant '{merchant.display_name}' (ANZSIC {merchant.anzsic_code}, ID: {merchant.id})")


@merchant_group.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum results")
@click.pass_context
def search_merchants(ctx, query: str, limit: int):
    """Search merchants by name."""
    merchants = MerchantService(ctx.obj["db"]).search(query, limit=limit)
    if not merchants:
        click.echo(f"No merchants match '{query}'.")
        return

    click.echo(f"{'Merchant':<30} {'ANZSIC':<8} {'Source':<10} {'Uses':>6}")
    click.echo("-" * 57)
    for merchant in merchants:
        click.echo(
            f"{merchant.display_name[:30]:<30} {merchant.anzsic_code:<8} "
            f"{merchant.source:<10} {merchant.usage_count:>6}"
        )


@merchant_group.command("stats")
@click.pass_context
def merchant_stats(ctx):
    """Show merchant table statistics."""
    stats = MerchantService(ctx.obj["db"]).get_statistics()
    click.echo(f"Active merchants: {stats.total}")

    if stats.by_source:
        click.echo("\nBy source:")
        for source, count in sorted(stats.by_source.items()):
            click.echo(f"  {source:<12} {count:>6}")
    if stats.by_anzsic_code:
        click.echo("\nBy ANZSIC code:")
        for code, count in sorted(stats.by_anzsic_code.items()):
            click.echo(f"  {code:<12} {count:>6}")
    if stats.most_used:
        click.echo("\nMost used:")
        for merchant in stats.most_used:
            click.echo(f"  {merchant.display_name:<30} {merchant.usage_count:>6}")


@merchant_group.command("deactivate")
@click.argument("name")
@click.pass_context
def deactivate_merchant(ctx, name: str):
    """Stop using a merchant for classification."""
    try:
        MerchantService(ctx.obj["db"]).deactivate(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deactivated merchant '{name}'")


@merchant_group.command("bulk-search")
@click.argument("descriptions", nargs=-1, required=True)
@click.pass_context
def bulk_search(ctx, descriptions: tuple[str, ...]):
    """Match transaction descriptions against known merchants."""
    matches, stats = MerchantService(ctx.obj["db"]).bulk_search(list(descriptions))
    for match in matches:
        click.echo(
            f"{match.description} -> {match.merchant.display_name} "
            f"({match.match_type}, score {match.score})"
        )
    click.echo(
        f"\n{stats['matches']} of {stats['total_descriptions']} descriptions matched "
        f"({stats['exact_matches']} exact, {stats['fuzzy_matches']} fuzzy)"
    )


def register_commands(cli):
    """Register merchant commands with main CLI."""
    cli.add_command(merchant_group, name="merchant")
