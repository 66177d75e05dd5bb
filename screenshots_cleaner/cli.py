"""CLI surface: the clean-screenshots command and logging setup."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from screenshots_cleaner.cleaner.coordinator import Coordinator

console = Console()
logger = logging.getLogger(__name__)

DEBUG_NAMESPACE = "screenshots-cleaner"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def debug_enabled(env: dict[str, str] | None = None) -> bool:
    """Whether ``DEBUG`` asks for this plugin's debug output."""
    value = (os.environ if env is None else env).get("DEBUG", "")
    names = [n.strip() for n in value.split(",")]
    return "*" in names or DEBUG_NAMESPACE in value


def build_clean_command(coordinator: Coordinator) -> click.Command:
    @click.command("clean-screenshots")
    def clean_screenshots() -> None:
        """Clean unused screenshots."""
        setup_logging(debug_enabled())
        try:
            asyncio.run(coordinator.clean())
        except Exception:
            logger.exception("Failed to clean unused screenshots")
            sys.exit(1)

    return clean_screenshots
