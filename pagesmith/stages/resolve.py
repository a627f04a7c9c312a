"""Resolve stage — locate the generator and every pinned module.

Runs before anything touches the content tree. Any failure here means
the build never reaches the generator, so nothing can be published.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pagesmith.core.hasher import sha256_file
from pagesmith.core.lockfile import LockFileError, load_lock_file
from pagesmith.core.module_resolver import ModuleResolutionError, ModuleResolver
from pagesmith.core.version_pinner import VersionPinner
from pagesmith.stages.base import BaseStage

logger = logging.getLogger(__name__)


class ResolveStage(BaseStage):
    """Check the toolchain pin and fetch locked modules."""

    @property
    def stage_id(self) -> str:
        return "resolve"

    @property
    def display_name(self) -> str:
        return "Resolve Dependencies"

    def hash_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        lock_path = Path(run_context["lock_path"])
        return {"lock_sha256": sha256_file(lock_path) if lock_path.is_file() else ""}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Reads ``lock_path``, ``resolver`` and ``theme_override``.

        Sets ``lock``, ``toolchain`` and ``theme_path`` on *run_context*.
        """
        lock_path = Path(run_context["lock_path"])
        override: Path | None = run_context.get("theme_override")
        resolver: ModuleResolver = run_context["resolver"]

        lock = load_lock_file(lock_path) if lock_path.exists() else None
        if lock is None and override is None:
            raise LockFileError(
                f"Lock file not found: {lock_path}, and no theme path given"
            )
        run_context["lock"] = lock

        pinner = VersionPinner(
            lock.generator if lock else None,
            binary=run_context.get("generator_binary"),
        )
        toolchain = pinner.ensure()
        run_context["toolchain"] = toolchain

        revisions: dict[str, str] = {}
        resolved_paths: dict[str, Path] = {}
        for name, module in sorted((lock.modules if lock else {}).items()):
            resolved = resolver.resolve(name, module)
            revisions[name] = resolved.revision
            resolved_paths[name] = resolved.path

        if override is not None:
            if not Path(override).is_dir():
                raise ModuleResolutionError(f"Theme path does not exist: {override}")
            theme_path: Path | None = Path(override)
            theme_source = "environment"
        elif lock is not None and lock.theme is not None:
            theme_path = resolved_paths[lock.theme]
            theme_source = lock.theme
        else:
            theme_path = None
            theme_source = ""

        run_context["theme_path"] = theme_path
        logger.info(
            "Resolved %s %s with %d module(s)", toolchain.name, toolchain.version, len(revisions)
        )
        return {
            "generator": toolchain.name,
            "generator_version": toolchain.version,
            "modules": revisions,
            "theme_source": theme_source,
            "_theme_path": str(theme_path) if theme_path else "",
            "_binary_path": toolchain.binary_path,
        }
