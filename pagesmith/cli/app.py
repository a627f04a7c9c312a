"""Main Typer application — imports and registers all CLI commands.

Entry point: ``pagesmith`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from pagesmith import __version__
from pagesmith.cli.commands.build import build_cmd
from pagesmith.cli.commands.doctor import doctor_cmd
from pagesmith.cli.commands.env import env_cmd
from pagesmith.cli.commands.posts import posts_cmd
from pagesmith.cli.commands.publish import publish_cmd
from pagesmith.cli.commands.status import status_cmd
from pagesmith.config import BuildSettings
from pagesmith.logging_setup import configure_logging

app = typer.Typer(
    name="pagesmith",
    help="pagesmith: deterministic build and publish pipeline for a static blog.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="build", help="Generate the site into the publish directory.")(build_cmd)
app.command(name="publish", help="Build and deploy the site.")(publish_cmd)
app.command(name="posts", help="List documents in the content tree.")(posts_cmd)
app.command(name="status", help="Show the stage states of a run.")(status_cmd)
app.command(name="doctor", help="Check the generator, lock file and theme.")(doctor_cmd)
app.command(name="env", help="Print the generator environment as shell exports.")(env_cmd)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pagesmith {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(BuildSettings().log_level)


def main() -> None:
    """Entry point for the ``pagesmith`` console script."""
    app()


if __name__ == "__main__":
    main()
