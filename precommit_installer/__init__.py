"""Interactive installer for curated pre-commit hooks, templates and scripts."""

from __future__ import annotations

import logging

from rich.console import Console

__all__ = [
    "console",
    "logger",
    "configure_logging",
]

__version__ = "0.3.0"

console = Console()
logger = logging.getLogger("precommit_installer")


def configure_logging(level: str = "WARNING") -> None:
    """Configure package-wide logging (idempotent)."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level.upper())
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
