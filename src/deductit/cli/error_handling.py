"""CLI error handling helpers."""

import logging

import click

from deductit.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a user-facing error and exit with status 1.

    The traceback is logged at DEBUG, so ``--verbose`` shows where the
    error came from.
    """
    logger.debug("%s failed", ctx.command_path, exc_info=error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
