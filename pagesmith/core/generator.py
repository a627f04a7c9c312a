"""Site generator invocation.

The generator is opaque: ``generate(site_dir, env) -> publish_dir``. Hugo
reads all of its configuration from the site directory and the
environment, so it is run with no flags at all.

Generation is atomic from the caller's point of view. Output goes to a
temporary sibling of the publish directory and replaces it only after the
generator exits cleanly; on failure the previous output is untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from pagesmith.core.errors import ContentGenerationError
from pagesmith.models.build import BuildConfiguration

logger = logging.getLogger(__name__)

_STDERR_TAIL = 2000


class GenerationError(ContentGenerationError):
    """Raised when the generator fails or cannot be started."""


@runtime_checkable
class SiteGenerator(Protocol):
    """Anything that can render a site into a directory."""

    def generate(self, site_dir: Path, publish_dir: Path, env: dict[str, str]) -> None:
        """Render *site_dir* into *publish_dir* (which exists and is empty)."""
        ...


class HugoGenerator:
    """Runs the ``hugo`` binary as a subprocess."""

    def __init__(self, binary: str = "hugo", *, timeout: int = 600) -> None:
        self.binary = binary
        self.timeout = timeout

    def generate(self, site_dir: Path, publish_dir: Path, env: dict[str, str]) -> None:
        proc_env = {**os.environ, **env, "HUGO_PUBLISHDIR": str(publish_dir)}
        logger.info("Running %s in %s", self.binary, site_dir)
        try:
            result = subprocess.run(
                [self.binary],
                cwd=site_dir,
                env=proc_env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise GenerationError(f"Generator {self.binary!r} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise GenerationError(
                f"Generator {self.binary!r} timed out after {self.timeout}s"
            ) from exc

        if result.stdout:
            logger.debug("%s stdout:\n%s", self.binary, result.stdout.rstrip())
        if result.returncode != 0:
            tail = (result.stderr or result.stdout or "").strip()[-_STDERR_TAIL:]
            raise GenerationError(
                f"Generator {self.binary!r} exited with status {result.returncode}: {tail}"
            )


def run_generator(
    generator: SiteGenerator,
    config: BuildConfiguration,
    env: dict[str, str],
) -> Path:
    """Generate into a temporary directory, then swap it into place.

    Returns the publish directory.
    """
    site_dir = Path(config.site_dir).resolve()
    publish_dir = Path(config.publish_dir).resolve()
    publish_dir.parent.mkdir(parents=True, exist_ok=True)

    scratch = Path(tempfile.mkdtemp(prefix=f".{publish_dir.name}-", dir=publish_dir.parent))
    try:
        generator.generate(site_dir, scratch, env)
        scratch.chmod(0o755)
        _swap_into_place(scratch, publish_dir)
    finally:
        if scratch.exists():
            shutil.rmtree(scratch)
    return publish_dir


def _swap_into_place(source: Path, target: Path) -> None:
    """Replace *target* with *source*, keeping the old tree until the rename."""
    backup: Path | None = None
    if target.exists():
        backup = target.with_name(f".{target.name}.old")
        if backup.exists():
            shutil.rmtree(backup)
        target.rename(backup)
    try:
        source.rename(target)
    except OSError:
        if backup is not None:
            backup.rename(target)
        raise
    if backup is not None:
        shutil.rmtree(backup)
