"""Main CLI entry point."""

import logging

import click
from deductit.database.factories import create_sqlite_database

# Import and register all commands at module level
from deductit.cli.commands import (
    anzsic,
    classify,
    income,
    merchant,
    override,
    seed,
    serve,
    statement,
    summary,
    toggle,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DEDUCTIT_DB_PATH environment variable)",
    envvar="DEDUCTIT_DB_PATH",
)
@click.option(
    "--user",
    default="default",
    show_default=True,
    envvar="DEDUCTIT_USER",
    help="User whose overrides, toggles and income apply",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user: str, verbose: bool):
    """Deductit - Australian tax deduction tracker.

    Parse bank statement PDFs, classify transactions into ATO deduction
    categories and estimate the tax saved by claiming them.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Open the database only when a command runs, not for --help
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user"] = user
        ctx.call_on_close(db.disconnect)


# Register all commands
seed.register_commands(cli)
statement.register_commands(cli)
classify.register_commands(cli)
summary.register_commands(cli)
merchant.register_commands(cli)
anzsic.register_commands(cli)
override.register_commands(cli)
toggle.register_commands(cli)
income.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
