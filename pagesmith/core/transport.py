"""Deploy transports — hand a named artifact to its hosting target.

The transport is an external collaborator: the pipeline only relies on
``deploy(artifact_name, data) -> DeploymentResult``. ``LocalDirectoryTransport``
serves from a directory on disk, replacing the live tree in one rename so
a failed deploy leaves the previous site being served.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from pagesmith.core.errors import PublishError
from pagesmith.core.hasher import sha256_hex
from pagesmith.core.packaging import unpack_artifact
from pagesmith.models.artifacts import DeploymentResult

logger = logging.getLogger(__name__)


class DeployError(PublishError):
    """Raised when the transport cannot activate an artifact."""


@runtime_checkable
class DeployTransport(Protocol):
    """Uploads an artifact to a hosting target and activates it."""

    def site_url(self) -> str:
        """URL the site will be served from once deployed."""
        ...

    def deploy(self, artifact_name: str, data: bytes) -> DeploymentResult:
        ...


class LocalDirectoryTransport:
    """Deploys by extracting the artifact into ``target_dir``.

    Parameters
    ----------
    target_dir:
        Directory the site is served from.
    base_url:
        Public URL of ``target_dir``. Defaults to its ``file://`` URI.
    """

    def __init__(self, target_dir: Path, *, base_url: str = "") -> None:
        self._target = Path(target_dir)
        self._base_url = base_url

    def site_url(self) -> str:
        if self._base_url:
            return self._base_url
        return self._target.resolve().as_uri() + "/"

    def deploy(self, artifact_name: str, data: bytes) -> DeploymentResult:
        target = self._target.resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        incoming = Path(tempfile.mkdtemp(prefix=f".{target.name}-new-", dir=target.parent))
        backup = target.with_name(f".{target.name}-old")
        try:
            unpack_artifact(data, incoming)
            incoming.chmod(0o755)
            if backup.exists():
                shutil.rmtree(backup)
            if target.exists():
                target.rename(backup)
            try:
                incoming.rename(target)
            except OSError as exc:
                if backup.exists():
                    backup.rename(target)
                raise DeployError(f"Could not activate deployment at {target}: {exc}") from exc
        except OSError as exc:
            raise DeployError(f"Deployment to {target} failed: {exc}") from exc
        finally:
            if incoming.exists():
                shutil.rmtree(incoming)
            if backup.exists():
                shutil.rmtree(backup)

        result = DeploymentResult(
            artifact_name=artifact_name,
            content_address=f"sha256:{sha256_hex(data)}",
            location=str(target),
            url=self.site_url(),
        )
        logger.info("Deployed %s to %s", artifact_name, result.url)
        return result
