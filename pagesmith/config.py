"""Build settings — env-driven, read once per invocation.

Centralized settings using pydantic-settings. Reads from a .env file and
PAGESMITH_* environment variables. The two locations the generator itself
understands (``HUGO_PUBLISHDIR`` and ``HUGO_MODULE_IMPORTS_PATH``) are
accepted as aliases so a shell prepared for Hugo drives pagesmith unchanged.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagesmith.models.build import BuildConfiguration


class BuildSettings(BaseSettings):
    """Process-wide build settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PAGESMITH_LOG_LEVEL=DEBUG
        export HUGO_PUBLISHDIR=/tmp/site
        export HUGO_MODULE_IMPORTS_PATH=/nix/store/...-source

    Or via .env file::

        PAGESMITH_BASE_URL=https://example.github.io/
        PAGESMITH_ALLOW_EMPTY_PUBLISH=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAGESMITH_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Runtime
    environment: str = "development"
    log_level: str = "INFO"

    # Site layout
    site_dir: Path = Path(".")
    content_dir: Path = Path("content")
    publish_dir: Path = Field(
        default=Path("public"),
        validation_alias=AliasChoices("PAGESMITH_PUBLISH_DIR", "HUGO_PUBLISHDIR", "publish_dir"),
    )
    theme_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "PAGESMITH_THEME_PATH", "HUGO_MODULE_IMPORTS_PATH", "theme_path"
        ),
    )
    staging_dir: Path = Path("_site")

    # Tool state
    state_dir: Path = Path(".pagesmith")
    lock_file: Path = Path("pagesmith.lock")

    # Generator
    generator_binary: str = "hugo"
    generator_timeout_seconds: int = 600
    fetch_timeout_seconds: float = 60.0

    # Hosting
    base_url: str = ""
    artifact_name: str = "github-pages"
    deploy_dir: Path = Path(".pagesmith/deploy")
    concurrency_group: str = "pages"
    lock_timeout_seconds: float | None = None
    allow_empty_publish: bool = False

    @property
    def ledger_path(self) -> Path:
        return self.state_dir / "ledger.db"

    @property
    def artifact_store_path(self) -> Path:
        return self.state_dir / "artifacts"

    @property
    def module_cache_path(self) -> Path:
        return self.state_dir / "modules"

    @property
    def lock_dir(self) -> Path:
        return self.state_dir / "locks"

    def resolve_path(self, path: Path) -> Path:
        """Anchor a relative path at ``site_dir``."""
        return path if path.is_absolute() else self.site_dir / path

    def to_build_config(self) -> BuildConfiguration:
        """Freeze the generator-facing options into a BuildConfiguration."""
        return BuildConfiguration(
            site_dir=self.site_dir,
            content_dir=self.resolve_path(self.content_dir),
            publish_dir=self.resolve_path(self.publish_dir),
            theme_path=self.resolve_path(self.theme_path) if self.theme_path else None,
            staging_dir=self.resolve_path(self.staging_dir),
            base_url=self.base_url,
            generator_binary=self.generator_binary,
            generator_timeout_seconds=self.generator_timeout_seconds,
        )
