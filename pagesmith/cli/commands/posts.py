"""``pagesmith posts`` — list the documents in the content tree."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pagesmith.cli.common import fail, load_settings
from pagesmith.core.content_store import ContentStore
from pagesmith.core.errors import ContentGenerationError

console = Console()


def posts_cmd(
    drafts: bool = typer.Option(False, "--drafts", help="Include draft documents."),
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout to read (default: current directory).",
    ),
) -> None:
    """List documents newest first."""
    settings = load_settings(site_dir)
    store = ContentStore(settings.resolve_path(settings.content_dir))
    try:
        documents = store.documents(include_drafts=drafts)
    except ContentGenerationError as exc:
        raise fail(console, exc) from exc

    if not documents:
        console.print(f"[dim]No documents under {store.root}.[/dim]")
        return

    table = Table(title=f"Documents ({len(documents)})")
    table.add_column("Date", style="green")
    table.add_column("Title", style="cyan")
    table.add_column("Path", style="dim")
    if drafts:
        table.add_column("Draft", justify="center")

    for doc in documents:
        row = [doc.date.isoformat() if doc.date else "-", doc.title, str(doc.path)]
        if drafts:
            row.append("[yellow]Yes[/yellow]" if doc.draft else "")
        table.add_row(*row)
    console.print(table)
