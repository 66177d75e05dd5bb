"""Usage tracker: records which reference images each test would compare against.

Runs in every worker that drives a browser. While ``clean-screenshots`` is
active, a new session gets every ordinary command replaced by a no-op and
``assert_view`` replaced by a recorder, so tests run through without touching
a live page and without doing any image comparison.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any

from screenshots_cleaner.models.host import (
    AutomationSession,
    CapabilityDescriptor,
    HostConfig,
    get_test_context,
)
from screenshots_cleaner.models.run_context import RunContext

logger = logging.getLogger(__name__)

ASSERT_VIEW = "assert_view"

EVENT_EMITTER_METHODS = (
    "on",
    "once",
    "off",
    "emit",
    "add_listener",
    "remove_listener",
    "remove_all_listeners",
    "prepend_listener",
    "prepend_once_listener",
    "listeners",
    "listener_count",
    "event_names",
)

RESERVED_COMMANDS = frozenset(
    EVENT_EMITTER_METHODS + ("add_command", ASSERT_VIEW, "execution_context")
)


def is_stubbable(capability: CapabilityDescriptor) -> bool:
    """Whether a command should be replaced by a no-op during the scan."""
    if capability.reserved or capability.private:
        return False
    return capability.name not in RESERVED_COMMANDS and not capability.name.startswith("_")


async def _noop_command(*args: Any, **kwargs: Any) -> dict:
    return {"value": {}}


class NoopResult:
    """What a stubbed synchronous command returns.

    Synchronous commands hand back objects the test keeps using, such as
    ``page.locator("#menu").click()`` or ``with page.expect_popup():``. Any
    attribute or call on the result yields another result, and awaiting one
    resolves like an asynchronous stub.
    """

    def __getattr__(self, name: str) -> NoopResult:
        if name.startswith("_"):
            raise AttributeError(name)
        return self

    def __call__(self, *args: Any, **kwargs: Any) -> NoopResult:
        return self

    def __await__(self):
        return _noop_command().__await__()

    def __enter__(self) -> NoopResult:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    async def __aenter__(self) -> NoopResult:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


def _noop_sync_command(*args: Any, **kwargs: Any) -> NoopResult:
    return NoopResult()


class UsageTracker:
    """Instruments automation sessions for one worker."""

    def __init__(self, host_config: HostConfig, context: RunContext):
        self.host_config = host_config
        self.context = context
        self._instrumented: weakref.WeakSet = weakref.WeakSet()

    def on_new_browser(self, session: AutomationSession, browser_id: str) -> None:
        if not self.context.run_clean_screenshots:
            return
        if session in self._instrumented:
            logger.debug("Session for %s already instrumented", browser_id)
            return

        stubbed = [c for c in session.capabilities() if is_stubbable(c)]
        for capability in stubbed:
            stub = _noop_command if capability.is_async else _noop_sync_command
            session.add_command(capability.name, stub, overwrite=True)
        logger.debug("Stubbed %d commands for %s", len(stubbed), browser_id)

        browser_config = self.host_config.for_browser(browser_id)

        async def assert_view(state: str, *args: Any, **kwargs: Any) -> None:
            test = get_test_context(session.execution_context)
            ref_path = browser_config.get_screenshot_path(test, state)
            test.runner_ctx.setdefault("used_ref_paths", []).append(ref_path)

        session.add_command(ASSERT_VIEW, assert_view, overwrite=True)
        self._instrumented.add(session)
