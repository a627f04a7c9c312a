"""``pagesmith build`` — resolve dependencies and generate the site.

Needs no flags: the environment (``PAGESMITH_*``, ``HUGO_PUBLISHDIR``,
``HUGO_MODULE_IMPORTS_PATH``) selects the output directory and theme.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from pagesmith.cli.common import fail, load_settings
from pagesmith.core.driver import BuildDriver
from pagesmith.stages import StageExecutionError

console = Console()


def build_cmd(
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout to build (default: current directory).",
    ),
) -> None:
    """Build the site into the publish directory."""
    driver = BuildDriver(load_settings(site_dir))
    try:
        publish_dir = driver.build()
    except StageExecutionError as exc:
        console.print(f"[dim]Run {driver.run_id}[/dim]")
        raise fail(console, exc) from exc

    generated = driver.stage_result("generate")
    console.print(
        Panel(
            f"[bold]Run:[/bold] {driver.run_id}\n"
            f"[bold]Site version:[/bold] {driver.build_version}\n"
            f"[bold]Output:[/bold] {publish_dir}\n"
            f"[bold]Documents:[/bold] {generated.get('document_count', 0)}"
            f" ({generated.get('draft_count', 0)} draft)\n"
            f"[bold]Files:[/bold] {generated.get('file_count', 0)}\n"
            f"[bold]Digest:[/bold] {generated.get('output_digest', '')}",
            title="[bold green]Build complete[/bold green]",
            border_style="green",
        )
    )
