"""Automation session adapter for Playwright pages."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from playwright.async_api import Page

from screenshots_cleaner.cleaner.usage_tracker import EVENT_EMITTER_METHODS
from screenshots_cleaner.models.host import CapabilityDescriptor, Runnable

logger = logging.getLogger(__name__)


def page_capabilities() -> list[CapabilityDescriptor]:
    """Commands a Playwright ``Page`` exposes, declared from its type."""
    return [
        CapabilityDescriptor(
            name=name,
            reserved=name in EVENT_EMITTER_METHODS,
            private=name.startswith("_"),
            is_async=inspect.iscoroutinefunction(member),
        )
        for name, member in inspect.getmembers(Page)
        if callable(member) and not inspect.isclass(member)
    ]


class PageSession:
    """Wraps a Page so individual commands can be overridden.

    Calls to a command that was added with ``add_command`` go to the added
    function; everything else is forwarded to the page.
    """

    def __init__(self, page: Page, execution_context: Optional[Runnable] = None):
        self.page = page
        self.execution_context = execution_context
        self._commands: dict[str, Callable[..., Any]] = {}

    def capabilities(self) -> list[CapabilityDescriptor]:
        return page_capabilities()

    def add_command(
        self, name: str, fn: Callable[..., Any], overwrite: bool = False
    ) -> None:
        if not overwrite and (name in self._commands or hasattr(self.page, name)):
            raise ValueError(f"Command '{name}' already exists; pass overwrite=True to replace it")
        self._commands[name] = fn

    def __getattr__(self, name: str) -> Any:
        commands = self.__dict__.get("_commands", {})
        if name in commands:
            return commands[name]
        if "page" not in self.__dict__:
            raise AttributeError(name)
        return getattr(self.__dict__["page"], name)
