"""Shared utilities for noterelay CLI commands."""

from rich.console import Console

console = Console()


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Show only the last few characters of a token."""
    if not value:
        return "[dim]not set[/dim]"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * 8 + value[-visible:]
