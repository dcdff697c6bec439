"""API server command."""

import os

import click
from deductit.domain.open_banking import BasiqClient
from deductit.web.app import create_app


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", type=int, default=5000, show_default=True, help="Port to listen on")
@click.option("--debug", is_flag=True, help="Enable the Flask debugger")
@click.pass_context
def serve(ctx, host: str, port: int, debug: bool):
    """Run the JSON API server.

    Open-banking routes are enabled when BASIQ_API_KEY is set.
    """
    open_banking = BasiqClient() if os.getenv("BASIQ_API_KEY") else None
    app = create_app(db=ctx.obj["db"], open_banking=open_banking)
    # The database session is not shared across threads
    app.run(host=host, port=port, debug=debug, threaded=False)


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
