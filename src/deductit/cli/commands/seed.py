"""Seed reference data."""

import click
from deductit.domain.anzsic import AnzsicService
from deductit.domain.merchant import MerchantService


@click.command("seed")
@click.pass_context
def seed(ctx):
    """Load the default ANZSIC mappings and well-known merchants.

    Records that already exist are left untouched, so this is safe to run
    more than once.
    """
    db = ctx.obj["db"]

    mappings = AnzsicService(db).seed_defaults()
    merchants = MerchantService(db).seed_defaults()
    click.echo(f"Added {mappings} ANZSIC mappings and {merchants} merchants.")


def register_commands(cli):
    """Register seed command with main CLI."""
    cli.add_command(seed)
