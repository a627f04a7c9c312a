"""``pagesmith env`` — print the generator environment as shell exports.

Gives an interactive shell the same bindings a build passes to the
generator::

    eval "$(pagesmith env)"
    hugo server
"""

from __future__ import annotations

import shlex
from pathlib import Path

import typer
from rich.console import Console

from pagesmith.cli.common import fail, load_settings
from pagesmith.core.errors import DependencyResolutionError
from pagesmith.core.lockfile import load_lock_file
from pagesmith.core.module_resolver import ModuleResolver

console = Console()


def env_cmd(
    site_dir: Path = typer.Option(
        None,
        "--site-dir",
        "-C",
        help="Site checkout (default: current directory).",
    ),
) -> None:
    """Print export lines for the generator environment."""
    settings = load_settings(site_dir)
    config = settings.to_build_config()

    theme_path = config.theme_path
    lock_path = settings.resolve_path(settings.lock_file)
    if theme_path is None and lock_path.exists():
        try:
            lock = load_lock_file(lock_path)
            if lock.theme is not None:
                resolver = ModuleResolver(
                    settings.resolve_path(settings.module_cache_path),
                    base_dir=settings.site_dir,
                    timeout=settings.fetch_timeout_seconds,
                )
                theme_path = resolver.resolve(lock.theme, lock.modules[lock.theme]).path
        except DependencyResolutionError as exc:
            raise fail(Console(stderr=True), exc) from exc

    env = config.generator_env(theme_path=theme_path)
    for key, value in sorted(env.items()):
        typer.echo(f"export {key}={shlex.quote(value)}")
