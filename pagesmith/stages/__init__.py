"""Pipeline stages — registry mapping stage_id to stage class.

Usage::

    from pagesmith.stages import get_stage

    stage = get_stage("generate")
    result = stage.run_stage(run_context)
"""

from __future__ import annotations

from pagesmith.stages.base import BaseStage, StageExecutionError
from pagesmith.stages.configure import ConfigureStage
from pagesmith.stages.deploy import DeployStage
from pagesmith.stages.generate import GenerateStage
from pagesmith.stages.resolve import ResolveStage
from pagesmith.stages.stage_output import StageOutputStage
from pagesmith.stages.upload import UploadStage

STAGE_REGISTRY: dict[str, type[BaseStage]] = {
    "resolve": ResolveStage,
    "configure": ConfigureStage,
    "generate": GenerateStage,
    "stage": StageOutputStage,
    "upload": UploadStage,
    "deploy": DeployStage,
}


def get_stage(stage_id: str) -> BaseStage:
    """Instantiate a stage by its ``stage_id``.

    Raises ``KeyError`` if the stage_id is not registered.
    """
    try:
        cls = STAGE_REGISTRY[stage_id]
    except KeyError:
        raise KeyError(
            f"Unknown stage_id {stage_id!r}. "
            f"Registered stages: {sorted(STAGE_REGISTRY.keys())}"
        ) from None
    return cls()


__all__ = [
    "BaseStage",
    "StageExecutionError",
    "STAGE_REGISTRY",
    "get_stage",
    "ResolveStage",
    "ConfigureStage",
    "GenerateStage",
    "StageOutputStage",
    "UploadStage",
    "DeployStage",
]
