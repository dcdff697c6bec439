"""Deduction category toggle commands."""

import click
from deductit.cli.error_handling import handle_domain_error
from deductit.domain.errors import DomainError
from deductit.domain.preferences import PreferenceService


def _print_toggles(toggles: dict[str, bool]) -> None:
    for category, enabled in toggles.items():
        click.echo(f"[{'x' if enabled else ' '}] {category}")


@click.group()
def toggle_group():
    """Choose which deduction categories you claim."""
    pass


@toggle_group.command("list")
@click.pass_context
def list_toggles(ctx):
    """Show every deduction category and whether it is claimed."""
    _print_toggles(PreferenceService(ctx.obj["db"], ctx.obj["user"]).get_deduction_toggles())


@toggle_group.command("set")
@click.argument("category")
@click.option("--on/--off", "enabled", default=True, help="Claim or stop claiming the category")
@click.pass_context
def set_toggle(ctx, category: str, enabled: bool):
    """Turn one deduction category on or off."""
    try:
        toggles = PreferenceService(ctx.obj["db"], ctx.obj["user"]).set_deduction_toggle(category, enabled)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    _print_toggles(toggles)


@toggle_group.command("init")
@click.argument("categories", nargs=-1)
@click.pass_context
def init_toggles(ctx, categories: tuple[str, ...]):
    """Claim only the given categories and switch all others off.

    Examples:
        deductit toggle init "Home Office Expenses" "Vehicles, Travel & Transport"
    """
    try:
        toggles = PreferenceService(ctx.obj["db"], ctx.obj["user"]).initialize_from_onboarding(categories)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    _print_toggles(toggles)


def register_commands(cli):
    """Register toggle commands with main CLI."""
    cli.add_command(toggle_group, name="toggle")
