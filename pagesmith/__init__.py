"""pagesmith: deterministic build and publish pipeline for a static blog.

v0.2.0 — Python rendition of the flake + pages workflow:
  - Content store with YAML/TOML front-matter parsing
  - Lock file pinning the generator version and theme modules
  - Module resolver (path, GitHub archive, tarball) with SHA-256 checks
  - Atomic Hugo invocation driven only by environment bindings
  - Staging copy with an empty-output guard
  - Deterministic tar artifacts in a content-addressed store
  - Local directory deploy transport with atomic swap
  - Named concurrency group serialising publishes
  - Hash-chained run ledger for status and determinism checks
"""

__version__ = "0.2.0"
__description__ = "Deterministic build and publish pipeline for a Hugo-generated static blog"

from pagesmith.core.driver import BuildDriver
from pagesmith.cli.app import app as cli

__all__ = ["BuildDriver", "cli", "__version__"]
