"""Stage state models — linear pipeline, strict transitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StageState(str, Enum):
    """State of a single stage within a run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


# Enforced by StageMachine. There is no retry: a failed run is simply
# started again as a new run.
VALID_TRANSITIONS: dict[StageState, set[StageState]] = {
    StageState.NOT_STARTED: {StageState.RUNNING, StageState.SKIPPED},
    StageState.RUNNING: {StageState.PASSED, StageState.FAILED},
    StageState.PASSED: set(),
    StageState.FAILED: set(),
    StageState.SKIPPED: set(),
}


class StageDefinition(BaseModel):
    """A pipeline stage and its position in the linear sequence."""

    model_config = ConfigDict(frozen=True)

    stage_id: str
    display_name: str
    ordinal: int
    phase: str  # "build" or "publish"


PIPELINE_STAGES: list[StageDefinition] = [
    StageDefinition(stage_id="resolve", display_name="Resolve Dependencies", ordinal=0, phase="build"),
    StageDefinition(stage_id="configure", display_name="Configure Hosting", ordinal=1, phase="build"),
    StageDefinition(stage_id="generate", display_name="Generate Site", ordinal=2, phase="build"),
    StageDefinition(stage_id="stage", display_name="Stage Output", ordinal=3, phase="publish"),
    StageDefinition(stage_id="upload", display_name="Upload Artifact", ordinal=4, phase="publish"),
    StageDefinition(stage_id="deploy", display_name="Deploy", ordinal=5, phase="publish"),
]

BUILD_STAGE_IDS: list[str] = [sd.stage_id for sd in PIPELINE_STAGES if sd.phase == "build"]
PUBLISH_STAGE_IDS: list[str] = [sd.stage_id for sd in PIPELINE_STAGES if sd.phase == "publish"]
