"""Generate stage — validate content, then run the site generator.

The content tree is parsed first so malformed front-matter fails the
build with a precise file name instead of a generator stack trace.
The output digest recorded here is what makes repeated builds
comparable: same content, configuration and generator version should
give the same digest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pagesmith.core.content_store import ContentStore
from pagesmith.core.generator import SiteGenerator, run_generator
from pagesmith.core.hasher import iter_tree_files, tree_digest
from pagesmith.models.build import BuildConfiguration
from pagesmith.stages.base import BaseStage

logger = logging.getLogger(__name__)


class GenerateStage(BaseStage):
    """Render the site into the publish directory."""

    @property
    def stage_id(self) -> str:
        return "generate"

    @property
    def display_name(self) -> str:
        return "Generate Site"

    def hash_inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: BuildConfiguration = run_context["build_config"]
        content_dir = Path(config.content_dir)
        resolved = run_context.get("stage_results", {}).get("resolve", {})
        return {
            "content_digest": tree_digest(content_dir) if content_dir.is_dir() else "",
            "modules": resolved.get("modules", {}),
            "generator_version": resolved.get("generator_version", ""),
            "base_url": run_context.get("base_url", config.base_url),
        }

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        config: BuildConfiguration = run_context["build_config"]
        generator: SiteGenerator = run_context["generator"]

        store = ContentStore(config.content_dir, strict_dates=False)
        documents = store.documents(include_drafts=True)
        published = [d for d in documents if not d.draft]
        logger.info(
            "Content tree has %d document(s), %d published", len(documents), len(published)
        )

        env = config.generator_env(
            theme_path=run_context.get("theme_path"),
            base_url=run_context.get("base_url"),
        )
        publish_dir = run_generator(generator, config, env)

        return {
            "document_count": len(published),
            "draft_count": len(documents) - len(published),
            "file_count": len(iter_tree_files(publish_dir)),
            "output_digest": tree_digest(publish_dir),
            "_publish_dir": str(publish_dir),
        }
