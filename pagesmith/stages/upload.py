"""Upload stage — pack the staging directory as a named artifact."""

from __future__ import annotations

from typing import Any

from pagesmith.core.artifact_store import ContentAddressedStore
from pagesmith.core.packaging import OutputMissingError, pack_directory
from pagesmith.models.build import BuildConfiguration
from pagesmith.stages.base import BaseStage


class UploadStage(BaseStage):
    @property
    def stage_id(self) -> str:
        return "upload"

    @property
    def display_name(self) -> str:
        return "Upload Artifact"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: BuildConfiguration = run_context["build_config"]
        store: ContentAddressedStore = run_context["artifact_store"]
        name: str = run_context["artifact_name"]

        if not config.staging_dir.is_dir():
            raise OutputMissingError(f"Staging directory does not exist: {config.staging_dir}")

        artifact = store.store(
            pack_directory(config.staging_dir),
            name=name,
            artifact_type="site-tar",
            metadata={"run_id": run_context.get("run_id", "")},
        )
        return {
            "artifact_name": artifact.name,
            "content_address": artifact.content_address,
            "size_bytes": artifact.size_bytes,
            "artifact_references": [artifact.content_address],
        }
