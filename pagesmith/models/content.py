"""Content document model — authored by a human, never mutated here."""

from __future__ import annotations

import datetime as dt
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict


class Document(BaseModel):
    """A single post in the content tree.

    Identity is ``path``, relative to the content root and POSIX-style so it
    is stable across platforms.
    """

    model_config = ConfigDict(frozen=True)

    path: PurePosixPath
    title: str
    date: dt.date | None = None
    body: str = ""
    draft: bool = False
    front_matter: dict[str, Any] = {}

    @property
    def slug(self) -> str:
        """URL slug the generator derives from the file name."""
        if self.path.stem == "index":
            return self.path.parent.name
        return self.path.stem
