"""Content-addressed, immutable artifact store with named refs.

Storage layout::

    {base_path}/objects/{sha256[0:2]}/{sha256}.dat
    {base_path}/refs/{name}.json

Objects are never rewritten or deleted. Refs are the only mutable part:
uploading a new artifact under an existing name repoints the ref.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from pagesmith.core.errors import PublishError
from pagesmith.core.hasher import sha256_file, sha256_hex
from pagesmith.models.artifacts import ArtifactRef, ContentAddressedArtifact

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ArtifactIntegrityError(PublishError):
    """Raised when a stored artifact's hash does not match its address."""


class ArtifactNotFoundError(PublishError):
    """Raised when an address or name has nothing stored behind it."""


class ContentAddressedStore:
    """SHA-256 keyed artifact store.

    Storing the same content twice is a no-op (idempotent).

    Parameters
    ----------
    base_path:
        Root directory for artifact storage.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        (self._base / "objects").mkdir(parents=True, exist_ok=True)
        (self._base / "refs").mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _extract_digest(content_address: str) -> str:
        return content_address.removeprefix("sha256:")

    def object_path(self, content_address: str) -> Path:
        digest = self._extract_digest(content_address)
        return self._base / "objects" / digest[:2] / f"{digest}.dat"

    def _ref_path(self, name: str) -> Path:
        if not _NAME_RE.match(name):
            raise ValueError(f"Invalid artifact name {name!r}")
        return self._base / "refs" / f"{name}.json"

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def store(
        self,
        data: bytes,
        *,
        name: str = "",
        artifact_type: str = "generic",
        metadata: dict[str, Any] | None = None,
    ) -> ContentAddressedArtifact:
        """Store bytes and return their artifact metadata.

        If the content already exists, its integrity is verified and the
        existing object is kept.
        """
        digest = sha256_hex(data)
        path = self.object_path(digest)

        if path.exists():
            if not self.verify(digest):
                raise ArtifactIntegrityError(
                    f"Existing artifact at {digest} failed integrity check"
                )
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp, path)

        artifact = ContentAddressedArtifact(
            content_address=f"sha256:{digest}",
            artifact_type=artifact_type,
            name=name or digest[:16],
            size_bytes=len(data),
            metadata=metadata or {},
        )
        if name:
            self._write_ref(artifact)
        logger.debug("Stored %s (%d bytes) as %s", artifact.name, len(data), artifact.content_address)
        return artifact

    def _write_ref(self, artifact: ContentAddressedArtifact) -> None:
        ref = ArtifactRef(
            name=artifact.name,
            content_address=artifact.content_address,
            artifact_type=artifact.artifact_type,
            size_bytes=artifact.size_bytes,
        )
        path = self._ref_path(artifact.name)
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(ref.model_dump(mode="json"), fh, sort_keys=True)
        os.replace(tmp, path)

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, content_address: str) -> bytes:
        """Retrieve artifact bytes by ``sha256:<hex>`` or bare hex digest."""
        path = self.object_path(content_address)
        if not path.exists():
            raise ArtifactNotFoundError(f"Artifact not found: {content_address}")
        return path.read_bytes()

    def lookup(self, name: str) -> ArtifactRef:
        """Return the ref currently published under *name*."""
        path = self._ref_path(name)
        if not path.exists():
            raise ArtifactNotFoundError(f"No artifact named {name!r}")
        return ArtifactRef.model_validate_json(path.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def verify(self, content_address: str) -> bool:
        """Re-hash stored data and compare against the content address."""
        path = self.object_path(content_address)
        if not path.exists():
            return False
        return sha256_file(path) == self._extract_digest(content_address)
