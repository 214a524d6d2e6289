"""Helper functions for CLI commands."""

import click

from ragdesk.constants import CONTENT_PREVIEW_LENGTH
from ragdesk.service.database import create_database, database_exists


def ensure_database_exists(create_if_missing: bool = False) -> bool:
    """Check if database exists, optionally create it.

    Args:
        create_if_missing: If True, attempt to create the database

    Returns:
        True if database exists (or was created)

    Raises:
        click.Abort: If database doesn't exist and can't be created
    """
    if database_exists():
        return True

    if create_if_missing:
        click.echo("Database does not exist. Creating database...")
        try:
            create_database()
            click.echo("✓ Database created successfully!")
            return True
        except Exception as e:
            click.echo(f"✗ Failed to create database: {e}", err=True)
            click.echo("\nPlease ensure RavenDB is running and accessible.", err=True)
            raise click.Abort()

    click.echo("✗ Error: Database does not exist!", err=True)
    click.echo("\nPlease create the database first using:", err=True)
    click.echo("  ragdesk-init --create-database", err=True)
    raise click.Abort()


def format_source(index: int, source: dict, max_length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Format a retrieved source for display.

    Args:
        index: Source number (1-based, matching the prompt's context numbering)
        source: Source dict with documentId, filename, content, score
        max_length: Maximum content length before truncation

    Returns:
        Formatted string for display
    """
    content = source.get("content", "")
    display_content = content[:max_length] + "..." if len(content) > max_length else content

    lines = [
        f"[{index}] {source.get('filename', 'Unknown')} (score: {source.get('score', 0.0):.4f})",
        f"    {display_content}",
    ]
    return "\n".join(lines)


def format_action(action: dict) -> str:
    """Format a suggested action for display."""
    confirm = " (requires confirmation)" if action.get("requiresConfirmation") else ""
    line = f"⚡ Suggested action: {action.get('name')}{confirm}"
    if action.get("explanation"):
        line += f"\n   {action['explanation']}"
    if action.get("parameters"):
        line += f"\n   Parameters: {action['parameters']}"
    return line
