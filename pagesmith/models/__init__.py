"""pagesmith data models — all Pydantic v2, all frozen (immutable)."""

from pagesmith.models.artifacts import ArtifactRef, ContentAddressedArtifact, DeploymentResult
from pagesmith.models.build import BuildConfiguration, RunConfig
from pagesmith.models.content import Document
from pagesmith.models.ledger import LedgerEntry
from pagesmith.models.lockfile import GeneratorPin, LockFile, ModuleLock
from pagesmith.models.stages import (
    BUILD_STAGE_IDS,
    PIPELINE_STAGES,
    PUBLISH_STAGE_IDS,
    VALID_TRANSITIONS,
    StageDefinition,
    StageState,
)

__all__ = [
    # content
    "Document",
    # lock file
    "GeneratorPin",
    "LockFile",
    "ModuleLock",
    # stages
    "StageState",
    "StageDefinition",
    "VALID_TRANSITIONS",
    "PIPELINE_STAGES",
    "BUILD_STAGE_IDS",
    "PUBLISH_STAGE_IDS",
    # artifacts
    "ArtifactRef",
    "ContentAddressedArtifact",
    "DeploymentResult",
    # ledger
    "LedgerEntry",
    # config
    "BuildConfiguration",
    "RunConfig",
]
