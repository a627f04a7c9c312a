"""Resolve pinned module locations to local directories.

``path`` modules are used in place. Remote modules (``github``,
``tarball``) are downloaded once into the module cache:

    {cache}/{name}-{cache_key}/

The archive is checked against its pinned SHA-256 before extraction, and
the extracted tree only appears under its final name once complete, so a
cache entry is either absent or whole.
"""

from __future__ import annotations

import io
import logging
import shutil
import tarfile
import tempfile
from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict

from pagesmith.core.errors import DependencyResolutionError
from pagesmith.core.hasher import sha256_hex
from pagesmith.models.lockfile import ModuleLock

logger = logging.getLogger(__name__)


class ModuleResolutionError(DependencyResolutionError):
    """Raised when a module location is missing or unreachable."""


class ModuleIntegrityError(DependencyResolutionError):
    """Raised when a downloaded module does not match its pinned hash."""


class ResolvedModule(BaseModel):
    """A module available on local disk."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    revision: str


class ModuleResolver:
    """Turns ModuleLock entries into local directories.

    Parameters
    ----------
    cache_dir:
        Where remote modules are extracted.
    base_dir:
        Anchor for relative ``path`` modules (usually the site directory).
    client:
        Optional preconfigured ``httpx.Client``; one is created per fetch
        otherwise.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        base_dir: Path = Path("."),
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._cache = Path(cache_dir)
        self._base = Path(base_dir)
        self._client = client
        self._timeout = timeout

    def resolve(self, name: str, module: ModuleLock) -> ResolvedModule:
        if module.type == "path":
            return self._resolve_path(name, module)
        return self._resolve_remote(name, module)

    def cache_path(self, name: str, module: ModuleLock) -> Path:
        return self._cache / f"{name}-{module.cache_key}"

    # ------------------------------------------------------------------
    # Path modules
    # ------------------------------------------------------------------

    def _resolve_path(self, name: str, module: ModuleLock) -> ResolvedModule:
        path = Path(module.path)
        if not path.is_absolute():
            path = self._base / path
        if not path.is_dir():
            raise ModuleResolutionError(f"Module {name!r}: directory not found: {path}")
        return ResolvedModule(name=name, path=path, revision=module.revision)

    # ------------------------------------------------------------------
    # Remote modules
    # ------------------------------------------------------------------

    def _resolve_remote(self, name: str, module: ModuleLock) -> ResolvedModule:
        target = self.cache_path(name, module)
        if target.is_dir():
            logger.debug("Module %s served from cache at %s", name, target)
            return ResolvedModule(name=name, path=target, revision=module.revision)

        url = module.archive_url
        logger.info("Fetching module %s from %s", name, url)
        data = self._download(name, url)

        if module.sha256:
            actual = sha256_hex(data)
            if actual != module.sha256:
                raise ModuleIntegrityError(
                    f"Module {name!r}: sha256 mismatch "
                    f"(expected {module.sha256}, got {actual})"
                )

        self._extract(name, data, target)
        return ResolvedModule(name=name, path=target, revision=module.revision)

    def _download(self, name: str, url: str) -> bytes:
        client = self._client or httpx.Client(
            timeout=self._timeout, follow_redirects=True
        )
        try:
            resp = client.get(url)
            resp.raise_for_status()
            return resp.content
        except httpx.HTTPStatusError as exc:
            raise ModuleResolutionError(
                f"Module {name!r}: {url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ModuleResolutionError(
                f"Module {name!r}: {url} unreachable: {exc}"
            ) from exc
        finally:
            if self._client is None:
                client.close()

    def _extract(self, name: str, data: bytes, target: Path) -> None:
        """Extract a tar.gz archive, stripping its single top-level dir."""
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{name}-", dir=target.parent))
        try:
            try:
                with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
                    tar.extractall(staging, filter="data")
            except (tarfile.TarError, OSError) as exc:
                raise ModuleResolutionError(
                    f"Module {name!r}: archive could not be extracted: {exc}"
                ) from exc

            entries = list(staging.iterdir())
            root = entries[0] if len(entries) == 1 and entries[0].is_dir() else staging
            root.rename(target)
        finally:
            if staging.exists():
                shutil.rmtree(staging)
