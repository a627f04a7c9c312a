"""Build driver — the central coordinator for pagesmith runs.

The BuildDriver wires together the RunLedger, ArtifactStore, ModuleResolver,
site generator and deploy transport, and walks a run through its stages in
order. It has exactly two outcomes: every planned stage passes, or the
first failure is recorded, the remaining stages are skipped, and the error
propagates to the caller.
"""

from __future__ import annotations

import logging
import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pagesmith.config import BuildSettings
from pagesmith.core.artifact_store import ContentAddressedStore
from pagesmith.core.concurrency import ConcurrencyGroup
from pagesmith.core.generator import HugoGenerator, SiteGenerator
from pagesmith.core.module_resolver import ModuleResolver
from pagesmith.core.run_ledger import RunLedger
from pagesmith.core.stage_machine import StageMachine
from pagesmith.core.transport import DeployTransport, LocalDirectoryTransport
from pagesmith.models.artifacts import DeploymentResult
from pagesmith.models.build import BuildConfiguration, RunConfig
from pagesmith.models.stages import (
    BUILD_STAGE_IDS,
    PUBLISH_STAGE_IDS,
    StageState,
)
from pagesmith.stages import StageExecutionError, get_stage

logger = logging.getLogger(__name__)

UNKNOWN_BUILD_VERSION = "0000000"


def detect_build_version(site_dir: Path) -> str:
    """Short git revision of the site checkout, or ``0000000``."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=site_dir,
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (subprocess.SubprocessError, OSError):
        return UNKNOWN_BUILD_VERSION
    rev = result.stdout.strip()
    return rev if result.returncode == 0 and rev else UNKNOWN_BUILD_VERSION


class BuildDriver:
    """Runs the build and publish stages for one site.

    Parameters
    ----------
    settings:
        Process-wide settings; read from the environment if not given.
    generator:
        Site generator. Defaults to ``HugoGenerator`` on the configured binary.
    transport:
        Deploy transport. Defaults to ``LocalDirectoryTransport`` on
        ``settings.deploy_dir``.
    resolver:
        Module resolver. Defaults to one caching under the state directory.
    """

    def __init__(
        self,
        settings: BuildSettings | None = None,
        *,
        generator: SiteGenerator | None = None,
        transport: DeployTransport | None = None,
        resolver: ModuleResolver | None = None,
        build_version: str | None = None,
    ) -> None:
        self.settings = settings or BuildSettings()
        s = self.settings

        self.build_config: BuildConfiguration = s.to_build_config()
        self.ledger = RunLedger(s.resolve_path(s.ledger_path))
        self.artifact_store = ContentAddressedStore(s.resolve_path(s.artifact_store_path))
        self.resolver = resolver or ModuleResolver(
            s.resolve_path(s.module_cache_path),
            base_dir=s.site_dir,
            timeout=s.fetch_timeout_seconds,
        )
        self.generator = generator or HugoGenerator(
            s.generator_binary, timeout=s.generator_timeout_seconds
        )
        self.transport = transport or LocalDirectoryTransport(
            s.resolve_path(s.deploy_dir), base_url=s.base_url
        )
        self.build_version = build_version or detect_build_version(s.site_dir)

        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.run_id = f"ps-{ts}-{uuid.uuid4().hex[:4]}"
        self.run_config = RunConfig(
            run_id=self.run_id,
            build_version=self.build_version,
            build_config=self.build_config,
        )
        self.stage_machine: StageMachine | None = None
        self.run_context: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def build(self) -> Path:
        """Resolve dependencies and generate the site.

        Returns the populated publish directory.
        """
        self._execute(BUILD_STAGE_IDS)
        return Path(self.build_config.publish_dir)

    def publish(self) -> DeploymentResult:
        """Stage, upload and deploy whatever the last build produced."""
        with self.concurrency_group():
            self._execute(PUBLISH_STAGE_IDS)
        return self.run_context["deployment"]

    def run_pipeline(self) -> DeploymentResult:
        """Build and publish as one run, holding the concurrency group throughout."""
        with self.concurrency_group():
            self._execute(BUILD_STAGE_IDS + PUBLISH_STAGE_IDS)
        return self.run_context["deployment"]

    def concurrency_group(self) -> ConcurrencyGroup:
        s = self.settings
        return ConcurrencyGroup(
            s.concurrency_group,
            s.resolve_path(s.lock_dir),
            timeout=s.lock_timeout_seconds,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_states(self) -> dict[str, StageState]:
        if self.stage_machine is None:
            return {}
        return self.stage_machine.get_all_states()

    def stage_result(self, stage_id: str) -> dict[str, Any]:
        return self.run_context.get("stage_results", {}).get(stage_id, {})

    def verify_chain(self) -> bool:
        return self.ledger.verify_chain(self.run_id)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _new_context(self) -> dict[str, Any]:
        s = self.settings
        return {
            "run_id": self.run_id,
            "run_config": self.run_config,
            "build_config": self.build_config,
            "generator_binary": s.generator_binary,
            "theme_override": s.resolve_path(s.theme_path) if s.theme_path else None,
            "lock_path": s.resolve_path(s.lock_file),
            "resolver": self.resolver,
            "generator": self.generator,
            "transport": self.transport,
            "artifact_store": self.artifact_store,
            "artifact_name": s.artifact_name,
            "allow_empty_publish": s.allow_empty_publish,
            "stage_results": {},
        }

    def _execute(self, plan: list[str]) -> None:
        machine = StageMachine(
            self.ledger, self.run_id, plan, build_version=self.build_version
        )
        self.stage_machine = machine
        self.run_context = self._new_context()
        logger.info("Run %s (site %s): %s", self.run_id, self.build_version, " -> ".join(plan))

        for stage_id in plan:
            stage = get_stage(stage_id)
            machine.transition(stage_id, StageState.RUNNING)
            try:
                result = stage.run_stage(self.run_context)
            except StageExecutionError as exc:
                machine.transition(stage_id, StageState.FAILED, detail=str(exc.cause))
                raise

            toolchain = self.run_context.get("toolchain")
            if toolchain is not None:
                machine.generator_version = toolchain.version
            machine.transition(
                stage_id,
                StageState.PASSED,
                input_hash=result["_input_hash"],
                output_hash=result["_output_hash"],
                artifact_references=result.get("artifact_references", []),
            )
        logger.info("Run %s finished: %d stage(s) passed", self.run_id, len(plan))
