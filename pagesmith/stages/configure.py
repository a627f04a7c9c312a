"""Configure stage — settle the URL the site will be served from."""

from __future__ import annotations

from typing import Any

from pagesmith.core.transport import DeployTransport
from pagesmith.stages.base import BaseStage


class ConfigureStage(BaseStage):
    """Pick the base URL: explicit setting first, then the transport's."""

    @property
    def stage_id(self) -> str:
        return "configure"

    @property
    def display_name(self) -> str:
        return "Configure Hosting"

    def hash_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        return {"base_url": run_context["build_config"].base_url}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        base_url: str = run_context["build_config"].base_url
        transport: DeployTransport | None = run_context.get("transport")
        if not base_url and transport is not None:
            base_url = transport.site_url()
        run_context["base_url"] = base_url
        return {"base_url": base_url}
