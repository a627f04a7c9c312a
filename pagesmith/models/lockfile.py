"""Lock file models — exact pins for the generator and external modules."""

from __future__ import annotations

import hashlib
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

LOCK_FILE_VERSION = 1


class GeneratorPin(BaseModel):
    """Pinned generator toolchain."""

    model_config = ConfigDict(frozen=True)

    name: str = "hugo"
    version: str | None = None  # None: any version is accepted


class ModuleLock(BaseModel):
    """A pinned module location.

    ``path`` modules point at a directory on disk. ``github`` modules name
    an exact commit of a repository. ``tarball`` modules name an archive
    URL. Remote modules may carry the SHA-256 of the downloaded archive.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["path", "github", "tarball"]
    path: str | None = None
    owner: str | None = None
    repo: str | None = None
    rev: str | None = None
    url: str | None = None
    sha256: str | None = None

    @model_validator(mode="after")
    def _check_fields(self) -> "ModuleLock":
        if self.type == "path" and not self.path:
            raise ValueError("path module requires 'path'")
        if self.type == "github" and not (self.owner and self.repo and self.rev):
            raise ValueError("github module requires 'owner', 'repo' and 'rev'")
        if self.type == "tarball" and not self.url:
            raise ValueError("tarball module requires 'url'")
        return self

    @property
    def archive_url(self) -> str | None:
        if self.type == "github":
            return f"https://github.com/{self.owner}/{self.repo}/archive/{self.rev}.tar.gz"
        return self.url

    @property
    def revision(self) -> str:
        """Short identifier used for cache keys and ledger records."""
        if self.rev:
            return self.rev
        if self.sha256:
            return self.sha256[:16]
        return self.path or "unpinned"

    @property
    def cache_key(self) -> str:
        """Cache directory suffix; changes whenever the fetched bytes may.

        A pinned sha256 identifies the archive outright. ``github`` modules
        are identified by their commit. Anything else is keyed on the
        archive URL as well, so editing the URL forces a fresh download.
        """
        if self.sha256:
            return self.sha256[:16]
        if self.type == "github":
            return self.rev or "unpinned"
        url_digest = hashlib.sha256((self.archive_url or "").encode("utf-8")).hexdigest()
        return f"{self.rev or 'url'}-{url_digest[:12]}"


class LockFile(BaseModel):
    """Contents of ``pagesmith.lock``."""

    model_config = ConfigDict(frozen=True)

    version: int = LOCK_FILE_VERSION
    generator: GeneratorPin = GeneratorPin()
    theme: str | None = None
    modules: dict[str, ModuleLock] = {}

    @model_validator(mode="after")
    def _check_theme(self) -> "LockFile":
        if self.version != LOCK_FILE_VERSION:
            raise ValueError(f"unsupported lock file version {self.version}")
        if self.theme is not None and self.theme not in self.modules:
            raise ValueError(f"theme {self.theme!r} is not a locked module")
        return self
