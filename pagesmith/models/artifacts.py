"""Content-addressed artifact models (immutable once stored)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactRef(BaseModel):
    """A name pointing at a stored artifact."""

    model_config = ConfigDict(frozen=True)

    name: str
    content_address: str  # "sha256:<hex>"
    artifact_type: str = "generic"
    size_bytes: int = 0


class ContentAddressedArtifact(BaseModel):
    """Metadata for a stored artifact — the bytes live in the store."""

    model_config = ConfigDict(frozen=True)

    content_address: str  # "sha256:<hex>"
    artifact_type: str
    name: str
    size_bytes: int
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    metadata: dict[str, Any] = {}


class DeploymentResult(BaseModel):
    """What the deploy transport reports back."""

    model_config = ConfigDict(frozen=True)

    artifact_name: str
    content_address: str
    location: str
    url: str
    deployed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
