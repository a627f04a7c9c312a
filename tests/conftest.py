"""Shared test fixtures for pagesmith."""

from __future__ import annotations

import json
import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from pagesmith.config import BuildSettings
from pagesmith.core.artifact_store import ContentAddressedStore
from pagesmith.core.content_store import ContentStore
from pagesmith.core.generator import GenerationError
from pagesmith.core.run_ledger import RunLedger

FAKE_HUGO_VERSION = "0.121.2"

# Stands in for the real binary: answers ``hugo version`` and otherwise
# renders content/*.md into $HUGO_PUBLISHDIR using only the environment.
_FAKE_HUGO_SCRIPT = f"""#!/bin/sh
set -e
if [ "$1" = "version" ]; then
  echo "hugo v{FAKE_HUGO_VERSION}-extended linux/amd64 BuildDate=unknown"
  exit 0
fi
if [ -n "$FAKE_HUGO_FAIL" ]; then
  echo "Error: failed to render pages" >&2
  exit 3
fi
out="$HUGO_PUBLISHDIR"
mkdir -p "$out"
echo "<h1>posts</h1>" > "$out/index.html"
echo "theme=$HUGO_MODULE_IMPORTS_PATH" > "$out/build.txt"
if [ -d content ]; then
  find content -name '*.md' ! -name '_index.md' | LC_ALL=C sort | while read -r f; do
    slug=$(basename "$f" .md)
    mkdir -p "$out/$slug"
    cp "$f" "$out/$slug/index.html"
    echo "<a href=\\"/$slug/\\">$slug</a>" >> "$out/index.html"
  done
fi
"""

_GENERATOR_ENV_VARS = (
    "HUGO_PUBLISHDIR",
    "HUGO_MODULE_IMPORTS_PATH",
    "HUGO_BASEURL",
    "FAKE_HUGO_FAIL",
)


class RecordingGenerator:
    """Generator double: renders one page per document plus a listing page.

    Every call is recorded so tests can assert whether generation ran.
    """

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict[str, object]] = []

    def generate(self, site_dir: Path, publish_dir: Path, env: dict[str, str]) -> None:
        self.calls.append({"site_dir": site_dir, "publish_dir": publish_dir, "env": dict(env)})
        if self.fail:
            raise GenerationError("template 'single.html' failed")

        documents = ContentStore(site_dir / "content", strict_dates=False).documents()
        links = []
        for doc in documents:
            page = publish_dir / doc.slug / "index.html"
            page.parent.mkdir(parents=True, exist_ok=True)
            page.write_text(
                f"<h1>{doc.title}</h1>\n<time>{doc.date}</time>\n{doc.body}", encoding="utf-8"
            )
            date = doc.date.isoformat() if doc.date else ""
            links.append(f'<li><a href="/{doc.slug}/">{doc.title}</a> {date}</li>')
        (publish_dir / "index.html").write_text(
            "<ul>\n" + "\n".join(links) + "\n</ul>\n", encoding="utf-8"
        )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's generator and pagesmith variables out of tests."""
    for key in list(os.environ):
        if key.startswith("PAGESMITH_") or key in _GENERATOR_ENV_VARS:
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_hugo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Put an executable fake ``hugo`` first on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "hugo"
    script.write_text(_FAKE_HUGO_SCRIPT, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return script


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A site checkout with a local theme module pinned in pagesmith.lock."""
    site = tmp_path / "site"
    (site / "content" / "posts").mkdir(parents=True)
    theme = site / "themes" / "papermod"
    (theme / "layouts").mkdir(parents=True)
    (theme / "layouts" / "single.html").write_text("{{ .Content }}", encoding="utf-8")
    (site / "hugo.toml").write_text('title = "Blog"\n', encoding="utf-8")
    lock = {
        "version": 1,
        "generator": {"name": "hugo", "version": FAKE_HUGO_VERSION},
        "theme": "papermod",
        "modules": {"papermod": {"type": "path", "path": "themes/papermod"}},
    }
    (site / "pagesmith.lock").write_text(json.dumps(lock), encoding="utf-8")
    return site


@pytest.fixture
def write_post(site_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write a Markdown post with YAML front-matter."""

    def _factory(
        name: str,
        *,
        title: str = "Untitled",
        date: str | None = "2024-01-01",
        draft: bool = False,
        body: str = "Hello.\n",
    ) -> Path:
        lines = ["---", f'title: "{title}"']
        if date is not None:
            lines.append(f"date: {date}")
        if draft:
            lines.append("draft: true")
        lines.append("---")
        path = site_dir / "content" / "posts" / f"{name}.md"
        path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def settings(site_dir: Path, tmp_path: Path, fake_hugo: Path, monkeypatch: pytest.MonkeyPatch) -> BuildSettings:
    """Settings rooted at the temp site, deploying to a temp directory."""
    monkeypatch.chdir(tmp_path)
    return BuildSettings(site_dir=site_dir, deploy_dir=tmp_path / "deploy")


@pytest.fixture
def generator() -> RecordingGenerator:
    return RecordingGenerator()


@pytest.fixture
def failing_generator() -> RecordingGenerator:
    return RecordingGenerator(fail=True)


@pytest.fixture
def ledger(tmp_path: Path) -> RunLedger:
    """Provide a fresh RunLedger backed by a temp SQLite database."""
    return RunLedger(tmp_path / "test_ledger.db")


@pytest.fixture
def artifact_store(tmp_path: Path) -> ContentAddressedStore:
    """Provide a fresh ContentAddressedStore in a temp directory."""
    return ContentAddressedStore(tmp_path / "artifacts")


@pytest.fixture
def run_id() -> str:
    """Provide a deterministic test run ID."""
    return "ps-test-run-001"
