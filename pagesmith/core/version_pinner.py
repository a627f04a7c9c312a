"""Toolchain pinning — locate the generator and enforce its pinned version.

Each run records the generator version it used, so that two runs can only
be expected to produce identical output when that version matches.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess

from pydantic import BaseModel, ConfigDict

from pagesmith.core.errors import DependencyResolutionError
from pagesmith.models.lockfile import GeneratorPin

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"v?(\d+\.\d+(?:\.\d+)?)")


class ToolchainNotFoundError(DependencyResolutionError):
    """Raised when the generator binary is not on PATH."""


class VersionDriftError(DependencyResolutionError):
    """Raised when the installed generator does not match its pin."""


class Toolchain(BaseModel):
    """A located generator binary."""

    model_config = ConfigDict(frozen=True)

    name: str
    binary_path: str
    version: str  # "unknown" when the version output cannot be parsed


def parse_version(output: str) -> str | None:
    """Extract the first dotted version number from ``<tool> version`` output."""
    match = _VERSION_RE.search(output)
    return match.group(1) if match else None


class VersionPinner:
    """Locates the generator and compares it against the lock file pin."""

    def __init__(self, pin: GeneratorPin | None = None, *, binary: str | None = None) -> None:
        self._pin = pin or GeneratorPin()
        self._binary = binary or self._pin.name

    @property
    def pin(self) -> GeneratorPin:
        return self._pin

    def probe(self) -> Toolchain:
        """Find the binary on PATH and ask it for its version."""
        found = shutil.which(self._binary)
        if found is None:
            raise ToolchainNotFoundError(
                f"Generator {self._binary!r} not found on PATH"
            )
        try:
            result = subprocess.run(
                [found, "version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
            output = result.stdout.strip() or result.stderr.strip()
        except (subprocess.SubprocessError, OSError) as exc:
            raise ToolchainNotFoundError(
                f"Generator {self._binary!r} at {found} could not be run: {exc}"
            ) from exc
        version = parse_version(output) or "unknown"
        logger.debug("Probed %s at %s: %s", self._binary, found, version)
        return Toolchain(name=self._pin.name, binary_path=found, version=version)

    def check_drift(self, toolchain: Toolchain, *, strict: bool = True) -> list[str]:
        """Compare a probed toolchain against the pin.

        Returns drift descriptions; empty means no drift. Raises
        VersionDriftError if strict=True and drift is detected.
        """
        drifts: list[str] = []
        if self._pin.version is not None and toolchain.version != self._pin.version:
            drifts.append(
                f"{self._pin.name}: pinned={self._pin.version!r}, installed={toolchain.version!r}"
            )
        if strict and drifts:
            raise VersionDriftError(f"Version drift detected: {'; '.join(drifts)}")
        return drifts

    def ensure(self) -> Toolchain:
        """Probe and enforce in one step."""
        toolchain = self.probe()
        self.check_drift(toolchain)
        return toolchain
