"""Status and connectivity commands."""

import asyncio

from rich.table import Table

from . import cli
from .shared import console, mask_secret


def _on_off(flag: bool) -> str:
    return "[green]on[/green]" if flag else "[dim]off[/dim]"


@cli.command()
def status():
    """Show effective configuration (secrets masked)."""
    from noterelay import __version__
    from noterelay.config import load_settings

    settings = load_settings()

    table = Table(title=f"noterelay v{__version__}", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Bot token", mask_secret(settings.telegram_bot_token))
    table.add_row("Owner user id", str(settings.user_id) if settings.user_id is not None else "[red]not set[/red]")
    table.add_row("Notes API", settings.api_url)
    table.add_row("Notes token", mask_secret(settings.api_token))
    table.add_row("Note type", str(settings.note_type))
    table.add_row("Link reader (Jina)", _on_off(settings.enable_jina))
    table.add_row("AI summary", _on_off(settings.enable_ai))
    if settings.enable_ai:
        table.add_row("  Model", f"{settings.openai_model} @ {settings.openai_url}")
        table.add_row("  Language", settings.summary_language)
    table.add_row("Telegraph", _on_off(settings.enable_telegraph))
    table.add_row("Retries", f"{settings.retry_max_attempts} attempts, {settings.retry_base_delay}s linear backoff")
    table.add_row("Log file", settings.log_file)

    console.print(table)


@cli.command()
def check():
    """Check the notes API is reachable."""
    from noterelay.config import load_settings
    from noterelay.notes import NotesClient

    settings = load_settings()
    client = NotesClient(settings.api_url, settings.api_token, timeout=settings.http_timeout)

    ok = asyncio.run(client.ping())
    if ok:
        console.print(f"[green]✓[/green] Notes API reachable at {settings.api_url}")
    else:
        console.print(f"[red]✗[/red] Notes API unreachable at {settings.api_url}")
        raise SystemExit(1)
