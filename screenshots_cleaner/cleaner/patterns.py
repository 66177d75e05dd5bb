"""Search pattern derivation from browser screenshot directories."""

from __future__ import annotations

import logging
import os

from screenshots_cleaner.models.host import (
    FixedLocation,
    HostConfig,
    PerTestLocation,
    TestCollection,
    TestDescriptor,
)
from screenshots_cleaner.models.run_context import RunContext

logger = logging.getLogger(__name__)


def gen_screen_pattern(directory: str) -> str:
    """Glob matching every PNG below ``directory``, made absolute."""
    return os.path.join(os.path.abspath(directory), "**", "*.png")


class PatternDeriver:
    """Appends derived search patterns to the run context once tests are read."""

    def __init__(self, host_config: HostConfig, context: RunContext, cwd: str | None = None):
        self.host_config = host_config
        self.context = context
        self.cwd = cwd

    def on_tests_read(self, collection: TestCollection) -> None:
        cwd = self.cwd or os.getcwd()
        per_test: dict[str, PerTestLocation] = {}

        for browser_id in collection.get_browsers():
            location = self.host_config.for_browser(browser_id).screenshots_dir
            match location:
                case FixedLocation(path=path):
                    pattern = gen_screen_pattern(os.path.join(cwd, path))
                    logger.debug("Screen pattern for %s: %s", browser_id, pattern)
                    self.context.screen_patterns.append(pattern)
                case PerTestLocation():
                    per_test[browser_id] = location

        def _visit(test: TestDescriptor, browser_id: str) -> None:
            location = per_test.get(browser_id)
            if location is not None:
                directory = location.resolve(test)
                self.context.screen_patterns.append(gen_screen_pattern(os.path.join(cwd, directory)))

            # Skipped tests still own reference images
            if test.pending:
                test.pending = False
                test.silent_skip = False

            if not test.disabled:
                self.context.expected_reports += 1

        collection.each_test(_visit)
