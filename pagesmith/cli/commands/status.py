"""``pagesmith status [RUN_ID]`` — stage states of a run.

A read-only projection over the run ledger; defaults to the most
recently active run.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pagesmith.cli.common import load_settings
from pagesmith.cli.render import StatusRenderer
from pagesmith.core.run_ledger import LedgerIntegrityError, RunLedger

console = Console()


def status_cmd(
    run_id: str = typer.Argument(None, help="Run to show (default: latest)."),
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout whose ledger to read (default: current directory).",
    ),
) -> None:
    """Show the stage states of a run."""
    settings = load_settings(site_dir)
    db_path = settings.resolve_path(settings.ledger_path)
    if not db_path.exists():
        console.print(f"[bold red]Ledger not found:[/bold red] {db_path}")
        console.print("[dim]Run a build first with: pagesmith build[/dim]")
        raise typer.Exit(code=1)

    ledger = RunLedger(db_path)
    run_id = run_id or ledger.get_latest_run_id()
    entries = ledger.get_run_entries(run_id) if run_id else []
    if not entries:
        console.print(f"[bold red]Run not found:[/bold red] {run_id}")
        all_runs = ledger.get_all_run_ids()
        if all_runs:
            console.print("\n[bold]Available runs:[/bold]")
            for rid in all_runs[:10]:
                console.print(f"  [cyan]{rid}[/cyan]")
        raise typer.Exit(code=1)

    try:
        chain_valid = ledger.verify_chain(run_id)
    except LedgerIntegrityError as exc:
        console.print(f"[bold red]Chain verification failed:[/bold red] {exc}")
        chain_valid = False

    StatusRenderer(console=console).print_run(ledger, run_id, chain_valid=chain_valid)
    if not chain_valid:
        raise typer.Exit(code=1)
