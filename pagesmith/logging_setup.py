"""Centralized logging configuration for pagesmith."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging"]

console = Console(stderr=True)


def _resolve_level(level_name: str) -> int:
    return getattr(logging, level_name.upper(), logging.INFO)


def configure_logging(level_name: str = "INFO") -> None:
    """Configure the root logger once with a Rich handler.

    Calling it again only adjusts the level.
    """
    root_logger = logging.getLogger()

    managed = next(
        (
            h
            for h in root_logger.handlers
            if isinstance(h, RichHandler) and getattr(h, "_pagesmith_managed", False)
        ),
        None,
    )
    if managed is None:
        root_logger.handlers.clear()
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._pagesmith_managed = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(level_name))
    logging.captureWarnings(True)
