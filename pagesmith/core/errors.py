"""Failure categories for the build and publish pipeline.

Every failure is fatal: nothing is retried or recovered locally. The
category tells the caller which part of the pipeline gave up.
"""

from __future__ import annotations


class DependencyResolutionError(RuntimeError):
    """The generator toolchain or a pinned module could not be resolved."""


class ContentGenerationError(RuntimeError):
    """The content tree was malformed or the generator failed."""


class PublishError(RuntimeError):
    """Copying, packaging or deploying the generated output failed."""
