"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the Telegram bot."""
    from noterelay.config import load_settings
    from noterelay.main import run, setup_logging

    settings = load_settings()
    setup_logging(settings, debug=debug)

    console.print("[bold blue]Starting noterelay...[/bold blue]")
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
