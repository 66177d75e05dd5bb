"""Merges per-test usage reports into the run-scoped accumulator."""

from __future__ import annotations

import logging

from screenshots_cleaner.models.host import Runnable, get_test_context
from screenshots_cleaner.models.run_context import RunContext

logger = logging.getLogger(__name__)


class UsageAggregator:
    def __init__(self, context: RunContext):
        self.context = context

    def on_test_end(self, runnable: Runnable) -> None:
        test = get_test_context(runnable)
        self.context.received_reports += 1

        used = test.runner_ctx.get("used_ref_paths")
        if used:
            self.context.used_ref_paths.extend(used)
            logger.debug("%s used %d reference images", test.title or test.file, len(used))

    def warn_missing_reports(self) -> None:
        """Log a warning when fewer tests reported back than were read."""
        missing = self.context.missing_reports
        if missing:
            logger.warning(
                "%d of %d tests did not report their screenshots; "
                "screenshots used only by them will be listed as unused",
                missing, self.context.expected_reports,
            )
