"""Pytest configuration and shared fixtures."""

import inspect
import os
from collections import defaultdict
from typing import Any, Callable

import pytest

from screenshots_cleaner.models.config import ENV_PREFIX
from screenshots_cleaner.models.host import (
    BrowserConfig,
    CapabilityDescriptor,
    FixedLocation,
    PerTestLocation,
    RunnerConfig,
    RunnerEvent,
    TestDescriptor,
)
from screenshots_cleaner.models.run_context import RunContext


# ============================================================================
# Runner Host Fakes
# ============================================================================


class FakeHost:
    """In-process runner host with a synchronous event bus."""

    def __init__(self, browsers: dict[str, BrowserConfig] | None = None, worker: bool = False):
        self.config = RunnerConfig(browsers=browsers or {})
        self.worker = worker
        self.handlers: dict[RunnerEvent, list[Callable]] = defaultdict(list)
        self.during_run: list[Callable[["FakeHost"], None]] = []
        self.run_calls = 0
        self.run_error: Exception | None = None

    def is_worker(self) -> bool:
        return self.worker

    def on(self, event: RunnerEvent, handler: Callable) -> None:
        self.handlers[event].append(handler)

    def emit(self, event: RunnerEvent, *args: Any) -> None:
        for handler in list(self.handlers[event]):
            handler(*args)

    def subscribed(self, event: RunnerEvent) -> bool:
        return bool(self.handlers[event])

    async def run(self) -> None:
        self.run_calls += 1
        if self.run_error:
            raise self.run_error
        for step in self.during_run:
            result = step(self)
            if inspect.isawaitable(result):
                await result


class FakeCollection:
    def __init__(self, tests: list[TestDescriptor], browsers: list[str]):
        self.tests = tests
        self.browsers = browsers

    def get_browsers(self) -> list[str]:
        return self.browsers

    def each_test(self, callback: Callable[[TestDescriptor, str], None]) -> None:
        for test in self.tests:
            for browser_id in self.browsers:
                callback(test, browser_id)


class FakeSession:
    """Automation session declaring a fixed set of commands."""

    def __init__(self, capabilities: list[CapabilityDescriptor]):
        self._capabilities = capabilities
        self.commands: dict[str, Callable] = {}
        self.add_command_calls: list[str] = []
        self.execution_context = None

    def capabilities(self) -> list[CapabilityDescriptor]:
        return self._capabilities

    def add_command(self, name: str, fn: Callable, overwrite: bool = False) -> None:
        self.add_command_calls.append(name)
        self.commands[name] = fn


class StubFileSystem:
    """Records every file system call; nothing touches the disk."""

    def __init__(self, found: list[str] | None = None, sizes: dict[str, int] | None = None):
        self.found = found or []
        self.sizes = sizes or {}
        self.expand_calls: list[tuple[list[str], tuple[str, ...]]] = []
        self.size_calls: list[str] = []
        self.unlinked: list[str] = []

    def expand(self, patterns, formats):
        self.expand_calls.append((list(patterns), tuple(formats)))
        return list(self.found)

    def size(self, path: str) -> int:
        self.size_calls.append(path)
        return self.sizes.get(path, 0)

    def unlink(self, path: str) -> None:
        self.unlinked.append(path)


class ScriptedPrompter:
    """Answers questions by name; unknown questions are answered with no."""

    def __init__(self, **answers: bool):
        self.answers = answers
        self.asked: list[str] = []

    async def ask(self, name: str, message: str) -> bool:
        self.asked.append(name)
        return self.answers.get(name, False)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_plugin_env(monkeypatch):
    """Keep screenshots_cleaner_* variables of the calling shell out of tests."""
    for name in list(os.environ):
        if name.lower().startswith(ENV_PREFIX):
            monkeypatch.delenv(name)


@pytest.fixture
def run_context() -> RunContext:
    return RunContext()


@pytest.fixture
def stub_fs() -> StubFileSystem:
    return StubFileSystem()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def fixed_browser() -> BrowserConfig:
    """Browser with a fixed screenshots directory and per-state files."""
    return BrowserConfig(
        screenshots_dir=FixedLocation(path="/screens"),
        screenshot_path=lambda test, state: f"/screens/{test.title}/{state}.png",
    )


@pytest.fixture
def per_test_browser() -> BrowserConfig:
    """Browser keeping screenshots next to each test file."""
    return BrowserConfig(
        screenshots_dir=PerTestLocation(resolve=lambda test: f"{test.file}/screens"),
        screenshot_path=lambda test, state: f"{test.file}/screens/{state}.png",
    )


@pytest.fixture
def session_capabilities() -> list[CapabilityDescriptor]:
    return [
        CapabilityDescriptor(name="url"),
        CapabilityDescriptor(name="click"),
        CapabilityDescriptor(name="locator", is_async=False),
        CapabilityDescriptor(name="on", reserved=True),
        CapabilityDescriptor(name="emit"),
        CapabilityDescriptor(name="add_command"),
        CapabilityDescriptor(name="assert_view"),
        CapabilityDescriptor(name="execution_context"),
        CapabilityDescriptor(name="_session_id"),
        CapabilityDescriptor(name="internal_retry", private=True),
    ]
