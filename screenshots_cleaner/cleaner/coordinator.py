"""Coordinator: drives a full test run, then hands its findings to the pipeline."""

from __future__ import annotations

import logging

import click

from screenshots_cleaner.cleaner.aggregator import UsageAggregator
from screenshots_cleaner.cleaner.patterns import PatternDeriver
from screenshots_cleaner.cleaner.pipeline import CleanupOutcome, CleanupPipeline
from screenshots_cleaner.cli import build_clean_command
from screenshots_cleaner.models.host import RunnerEvent, RunnerHost
from screenshots_cleaner.models.run_context import RunContext

logger = logging.getLogger(__name__)


class Coordinator:
    """Owns the clean-screenshots command in the process orchestrating the run."""

    def __init__(self, host: RunnerHost, context: RunContext, pipeline: CleanupPipeline):
        self.host = host
        self.context = context
        self.pipeline = pipeline
        self.deriver = PatternDeriver(host.config, context)
        self.aggregator = UsageAggregator(context)

    def register(self, program: click.Group) -> None:
        program.add_command(build_clean_command(self))

    async def clean(self) -> CleanupOutcome:
        self.context.screen_patterns.extend(self.context.config.patterns)
        self.host.on(RunnerEvent.AFTER_TESTS_READ, self.deriver.on_tests_read)
        self.host.on(RunnerEvent.TEST_END, self.aggregator.on_test_end)
        self.context.run_clean_screenshots = True

        logger.info("Running tests to collect used screenshots...")
        await self.host.run()
        self.aggregator.warn_missing_reports()

        return await self.pipeline.run(self.context.screen_patterns, self.context.used_ref_paths)
