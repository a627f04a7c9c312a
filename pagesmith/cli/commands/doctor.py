"""``pagesmith doctor`` — check that a build has what it needs.

Reports on the generator binary and its pinned version, the lock file,
and the theme module, without running a build.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pagesmith.cli.common import load_settings
from pagesmith.config import BuildSettings
from pagesmith.core.errors import DependencyResolutionError
from pagesmith.core.lockfile import load_lock_file
from pagesmith.core.module_resolver import ModuleResolver
from pagesmith.core.version_pinner import VersionPinner
from pagesmith.models.lockfile import LockFile

console = Console()


def _check_lock(settings: BuildSettings) -> tuple[bool, str, LockFile | None]:
    path = settings.resolve_path(settings.lock_file)
    if not path.exists():
        if settings.theme_path is not None:
            return True, f"{path} absent (theme from environment)", None
        return False, f"{path} not found", None
    try:
        lock = load_lock_file(path)
    except DependencyResolutionError as exc:
        return False, str(exc), None
    return True, f"{path} ({len(lock.modules)} module(s))", lock


def _check_generator(settings: BuildSettings, lock: LockFile | None) -> tuple[bool, str]:
    pinner = VersionPinner(lock.generator if lock else None, binary=settings.generator_binary)
    try:
        toolchain = pinner.probe()
    except DependencyResolutionError as exc:
        return False, str(exc)
    drift = pinner.check_drift(toolchain, strict=False)
    if drift:
        return False, "; ".join(drift)
    return True, f"{toolchain.binary_path} ({toolchain.version})"


def _check_theme(settings: BuildSettings, lock: LockFile | None) -> tuple[bool, str]:
    if settings.theme_path is not None:
        path = settings.resolve_path(settings.theme_path)
        return path.is_dir(), f"{path} (environment)"
    if lock is None or lock.theme is None:
        return True, "no theme configured"
    module = lock.modules[lock.theme]
    if module.type == "path":
        resolver = ModuleResolver(
            settings.resolve_path(settings.module_cache_path), base_dir=settings.site_dir
        )
        try:
            resolved = resolver.resolve(lock.theme, module)
        except DependencyResolutionError as exc:
            return False, str(exc)
        return True, f"{lock.theme} -> {resolved.path}"
    return True, f"{lock.theme} -> {module.archive_url} @ {module.revision}"


def doctor_cmd(
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout to check (default: current directory).",
    ),
) -> None:
    """Check the generator, lock file and theme."""
    settings = load_settings(site_dir)

    lock_ok, lock_detail, lock = _check_lock(settings)
    gen_ok, gen_detail = _check_generator(settings, lock)
    theme_ok, theme_detail = _check_theme(settings, lock)
    content_dir = settings.resolve_path(settings.content_dir)

    table = Table(title="pagesmith doctor", show_header=True, header_style="bold cyan")
    table.add_column("Check", style="bold", min_width=14)
    table.add_column("Status", justify="center", min_width=8)
    table.add_column("Details", min_width=30)

    def _status(ok: bool) -> str:
        return "[green]OK[/green]" if ok else "[red]FAIL[/red]"

    table.add_row("Generator", _status(gen_ok), gen_detail)
    table.add_row("Lock file", _status(lock_ok), lock_detail)
    table.add_row("Theme", _status(theme_ok), theme_detail)
    table.add_row(
        "Content",
        "[green]OK[/green]",
        str(content_dir) if content_dir.is_dir() else f"{content_dir} [dim](empty)[/dim]",
    )
    console.print(table)

    if not (gen_ok and lock_ok and theme_ok):
        raise typer.Exit(code=1)
