"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pagesmith.config import BuildSettings
from pagesmith.core.concurrency import ConcurrencyTimeoutError
from pagesmith.core.errors import ContentGenerationError, DependencyResolutionError, PublishError
from pagesmith.stages import StageExecutionError

_CATEGORIES: list[tuple[type[BaseException], str]] = [
    (DependencyResolutionError, "dependency resolution"),
    (ContentGenerationError, "content generation"),
    (PublishError, "publish"),
    (ConcurrencyTimeoutError, "concurrency"),
]


def load_settings(site_dir: Path | None) -> BuildSettings:
    """Settings from the environment, with ``--site-dir`` taking precedence."""
    if site_dir is None:
        return BuildSettings()
    return BuildSettings(site_dir=site_dir)


def failure_category(exc: BaseException) -> str:
    for cls, label in _CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "internal"


def fail(console: Console, exc: Exception) -> typer.Exit:
    """Print a failed run and return the Exit to raise."""
    if isinstance(exc, StageExecutionError):
        console.print(
            f"[bold red]Stage {exc.stage_id} failed[/bold red] "
            f"({failure_category(exc.cause)}): {exc.cause}"
        )
    else:
        console.print(f"[bold red]Failed[/bold red] ({failure_category(exc)}): {exc}")
    return typer.Exit(code=1)
