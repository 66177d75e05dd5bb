"""Interactive yes/no questions for the operator."""

from __future__ import annotations

import asyncio
from typing import Protocol

import click


class Prompter(Protocol):
    async def ask(self, name: str, message: str) -> bool:
        """Ask a yes/no question identified by ``name``."""

        ...


class ClickPrompter:
    """Asks on the terminal with ``click.confirm``; the default answer is no."""

    async def ask(self, name: str, message: str) -> bool:
        return await asyncio.to_thread(click.confirm, message, default=False)
