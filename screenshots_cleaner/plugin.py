"""Plugin entry point: wires the cleaner into a runner host."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from screenshots_cleaner.cleaner.coordinator import Coordinator
from screenshots_cleaner.cleaner.pipeline import CleanupPipeline
from screenshots_cleaner.cleaner.usage_tracker import UsageTracker
from screenshots_cleaner.models.config import parse_config
from screenshots_cleaner.models.host import RunnerEvent, RunnerHost
from screenshots_cleaner.models.run_context import RunContext
from screenshots_cleaner.utils.fs import FileSystem, LocalFileSystem
from screenshots_cleaner.utils.prompt import ClickPrompter, Prompter

logger = logging.getLogger(__name__)


def plugin(
    host: RunnerHost,
    options: Mapping[str, Any] | None = None,
    *,
    context: Optional[RunContext] = None,
    fs: Optional[FileSystem] = None,
    prompter: Optional[Prompter] = None,
    argv: Sequence[str] | None = None,
) -> Optional[RunContext]:
    """Activate the screenshots cleaner on ``host``.

    The coordinating process registers the ``clean-screenshots`` command;
    workers instrument new browser sessions. Pass the same ``context`` to
    every activation of one run so workers see the coordinator's state.
    Returns the run context, or ``None`` when the plugin is disabled.
    """
    config = parse_config(options, argv)
    if not config.enabled:
        logger.debug("Screenshots cleaner is disabled")
        return None

    if context is None:
        context = RunContext(config=config)
    else:
        context.config = config

    if host.is_worker():
        tracker = UsageTracker(host.config, context)
        host.on(RunnerEvent.NEW_BROWSER, tracker.on_new_browser)
        return context

    pipeline = CleanupPipeline(fs or LocalFileSystem(), prompter or ClickPrompter())
    coordinator = Coordinator(host, context, pipeline)
    host.on(RunnerEvent.CLI, coordinator.register)
    return context
