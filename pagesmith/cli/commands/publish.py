"""``pagesmith publish`` — build, stage, upload and deploy.

Only one publish per concurrency group runs at a time; a second one
waits for the first to finish.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from pagesmith.cli.common import fail, load_settings
from pagesmith.core.concurrency import ConcurrencyTimeoutError
from pagesmith.core.driver import BuildDriver
from pagesmith.stages import StageExecutionError

console = Console()


def publish_cmd(
    build: bool = typer.Option(
        True,
        "--build/--no-build",
        help="Run the build stages first, or publish the existing output only.",
    ),
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout to publish (default: current directory).",
    ),
) -> None:
    """Publish the site to the configured deployment target."""
    driver = BuildDriver(load_settings(site_dir))
    try:
        deployment = driver.run_pipeline() if build else driver.publish()
    except (StageExecutionError, ConcurrencyTimeoutError) as exc:
        console.print(f"[dim]Run {driver.run_id}[/dim]")
        raise fail(console, exc) from exc

    console.print(
        Panel(
            f"[bold]Run:[/bold] {driver.run_id}\n"
            f"[bold]Artifact:[/bold] {deployment.artifact_name} "
            f"({deployment.content_address[:12]})\n"
            f"[bold]URL:[/bold] {deployment.url}",
            title="[bold green]Deployed[/bold green]",
            border_style="green",
        )
    )
