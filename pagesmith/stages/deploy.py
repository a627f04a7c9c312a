"""Deploy stage — hand the named artifact to the deploy transport."""

from __future__ import annotations

from typing import Any

from pagesmith.core.artifact_store import ArtifactIntegrityError, ContentAddressedStore
from pagesmith.core.transport import DeployError, DeployTransport
from pagesmith.stages.base import BaseStage


class DeployStage(BaseStage):
    @property
    def stage_id(self) -> str:
        return "deploy"

    @property
    def display_name(self) -> str:
        return "Deploy"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        store: ContentAddressedStore = run_context["artifact_store"]
        transport: DeployTransport | None = run_context.get("transport")
        name: str = run_context["artifact_name"]

        if transport is None:
            raise DeployError("No deploy transport configured")

        ref = store.lookup(name)
        if not store.verify(ref.content_address):
            raise ArtifactIntegrityError(
                f"Artifact {name!r} ({ref.content_address}) failed integrity check"
            )
        deployment = transport.deploy(name, store.retrieve(ref.content_address))
        run_context["deployment"] = deployment
        return {
            "url": deployment.url,
            "content_address": deployment.content_address,
            "artifact_references": [deployment.content_address],
            "_location": deployment.location,
        }
