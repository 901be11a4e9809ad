"""noterelay CLI — command line interface."""

import click
from noterelay import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="noterelay")
@click.pass_context
def cli(ctx):
    """noterelay — save Telegram messages as notes"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]noterelay v{__version__}[/bold] — save Telegram messages as notes\n")

    commands = [
        ("start", "Start the Telegram bot"),
        ("status", "Show effective configuration"),
        ("check", "Check the notes API is reachable"),
    ]
    for name, desc in commands:
        console.print(f"    [bold]noterelay {name:10s}[/bold] {desc}")
    console.print()
    console.print("[dim]Run 'noterelay <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_status  # noqa: E402, F401
