"""Load ``pagesmith.lock``."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from pagesmith.core.errors import DependencyResolutionError
from pagesmith.models.lockfile import LockFile


class LockFileError(DependencyResolutionError):
    """Raised when the lock file is missing or malformed."""


def load_lock_file(path: Path) -> LockFile:
    """Parse a lock file from disk.

    A missing lock file is an error: every external module a build uses
    must be pinned.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise LockFileError(f"Lock file not found: {path}") from None
    try:
        return LockFile.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise LockFileError(f"Invalid lock file {path}: {exc}") from exc

