"""Build and run configuration models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field

from pagesmith.models.stages import PIPELINE_STAGES, StageDefinition


class BuildConfiguration(BaseModel):
    """Option name -> value mapping for a single invocation.

    Constructed once from BuildSettings and read-only for the rest of the
    build. The generator only ever sees it through ``generator_env()``.
    """

    model_config = ConfigDict(frozen=True)

    site_dir: Path = Path(".")
    content_dir: Path = Path("content")
    publish_dir: Path = Path("public")
    theme_path: Path | None = None
    staging_dir: Path = Path("_site")
    base_url: str = ""
    generator_binary: str = "hugo"
    generator_timeout_seconds: int = 600

    def generator_env(
        self,
        *,
        publish_dir: Path | None = None,
        theme_path: Path | None = None,
        base_url: str | None = None,
    ) -> dict[str, str]:
        """Environment bindings handed to the generator process."""
        env = {"HUGO_PUBLISHDIR": str(publish_dir or self.publish_dir)}
        theme = theme_path or self.theme_path
        if theme is not None:
            env["HUGO_MODULE_IMPORTS_PATH"] = str(theme)
        url = self.base_url if base_url is None else base_url
        if url:
            env["HUGO_BASEURL"] = url
        return env


class RunConfig(BaseModel):
    """Per-run record created when the driver starts a run."""

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=lambda: f"ps-{uuid.uuid4().hex[:12]}")
    build_version: str = "0000000"
    build_config: BuildConfiguration = BuildConfiguration()
    stage_plan: list[StageDefinition] = Field(
        default_factory=lambda: list(PIPELINE_STAGES)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
