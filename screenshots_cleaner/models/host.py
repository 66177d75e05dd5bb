"""Interfaces and data structures shared with the host test runner."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Callable, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field


class RunnerEvent(str, Enum):
    CLI = "cli"
    AFTER_TESTS_READ = "afterTestsRead"
    TEST_END = "testEnd"
    NEW_BROWSER = "newBrowser"


class TestDescriptor(BaseModel):
    """A single test as enumerated by the runner."""
    __test__ = False

    title: str = ""
    file: str = ""
    type: Literal["test"] = "test"
    pending: bool = False
    silent_skip: bool = False
    disabled: bool = False
    runner_ctx: dict[str, Any] = Field(default_factory=dict)


class HookDescriptor(BaseModel):
    """A before/after hook currently executing on behalf of a test."""
    title: str = ""
    type: Literal["hook"] = "hook"
    current_test: TestDescriptor


Runnable = Union[TestDescriptor, HookDescriptor]


class FixedLocation(BaseModel):
    kind: Literal["fixed"] = "fixed"
    path: str


class PerTestLocation(BaseModel):
    kind: Literal["per_test"] = "per_test"
    resolve: Callable[[TestDescriptor], str]


ScreenshotLocation = Annotated[
    Union[FixedLocation, PerTestLocation], Field(discriminator="kind")
]


class BrowserConfig(BaseModel):
    screenshots_dir: ScreenshotLocation
    screenshot_path: Callable[[TestDescriptor, str], str]

    def get_screenshot_path(self, test: TestDescriptor, state: str) -> str:
        """Return the reference image path a test compares ``state`` against."""
        return self.screenshot_path(test, state)


class RunnerConfig(BaseModel):
    browsers: dict[str, BrowserConfig] = Field(default_factory=dict)

    def for_browser(self, browser_id: str) -> BrowserConfig:
        return self.browsers[browser_id]


class CapabilityDescriptor(BaseModel):
    name: str
    reserved: bool = False
    private: bool = False
    is_async: bool = True


class HostConfig(Protocol):
    """Per-browser configuration lookup."""

    def for_browser(self, browser_id: str) -> BrowserConfig:
        ...


class TestCollection(Protocol):
    """Tests read by the runner, before any of them executes."""

    def get_browsers(self) -> list[str]:
        ...

    def each_test(self, callback: Callable[[TestDescriptor, str], None]) -> None:
        """Call ``callback(test, browser_id)`` for every test/browser pair."""

        ...


class AutomationSession(Protocol):
    """Browser session handed to workers on ``RunnerEvent.NEW_BROWSER``."""

    execution_context: Optional[Runnable]

    def capabilities(self) -> list[CapabilityDescriptor]:
        """Declare every command the session exposes."""

        ...

    def add_command(
        self, name: str, fn: Callable[..., Any], overwrite: bool = False
    ) -> None:
        ...


class RunnerHost(Protocol):
    """The test runner a plugin is activated in."""

    config: HostConfig

    def is_worker(self) -> bool:
        ...

    def on(self, event: RunnerEvent, handler: Callable[..., Any]) -> None:
        ...

    async def run(self) -> None:
        """Read and execute the whole test suite."""

        ...


def get_test_context(runnable: Runnable) -> TestDescriptor:
    """Return the test a runnable belongs to.

    Hooks run on behalf of the test currently being executed, so a hook
    resolves to that test; a test resolves to itself.
    """
    if runnable.type == "hook":
        return runnable.current_test
    return runnable
