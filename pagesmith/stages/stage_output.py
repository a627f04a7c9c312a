"""Stage-output step — copy generated files into the staging directory."""

from __future__ import annotations

from typing import Any

from pagesmith.core.hasher import tree_digest
from pagesmith.core.packaging import copy_tree_fresh
from pagesmith.models.build import BuildConfiguration
from pagesmith.stages.base import BaseStage


class StageOutputStage(BaseStage):
    """Relocate the publish directory into ``staging_dir``.

    Refuses a missing publish directory outright, and an empty one unless
    ``allow_empty_publish`` is set.
    """

    @property
    def stage_id(self) -> str:
        return "stage"

    @property
    def display_name(self) -> str:
        return "Stage Output"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: BuildConfiguration = run_context["build_config"]
        count = copy_tree_fresh(
            config.publish_dir,
            config.staging_dir,
            allow_empty=run_context.get("allow_empty_publish", False),
        )
        return {
            "file_count": count,
            "staging_digest": tree_digest(config.staging_dir),
            "_staging_dir": str(config.staging_dir),
        }
