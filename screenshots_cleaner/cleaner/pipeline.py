"""Cleanup pipeline: find, diff, size, confirm and delete unused screenshots."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, TypeVar

from rich.filesize import decimal

from screenshots_cleaner.utils.fs import FileSystem
from screenshots_cleaner.utils.prompt import Prompter

logger = logging.getLogger(__name__)

MAX_PARALLEL_FS_OPS = 16
SCREENSHOT_FORMATS = (".png",)

T = TypeVar("T")


class CleanupOutcome(str, Enum):
    NOT_FOUND = "not_found"
    NO_UNUSED = "no_unused"
    CANCELLED = "cancelled"
    REMOVED = "removed"


def find_unused(found: list[str], used: list[str]) -> list[str]:
    """Paths in ``found`` that are not in ``used``, in ``found`` order."""
    used_set = set(used)
    return [path for path in found if path not in used_set]


class CleanupPipeline:
    """Runs once after the test run, strictly in order. Errors propagate."""

    def __init__(self, fs: FileSystem, prompter: Prompter):
        self.fs = fs
        self.prompter = prompter

    async def run(self, patterns: list[str], used_ref_paths: list[str]) -> CleanupOutcome:
        patterns = list(dict.fromkeys(patterns))
        logger.debug("Try to find screen paths on file system by patterns:\n%s", "\n".join(patterns))

        found = await asyncio.to_thread(self.fs.expand, patterns, SCREENSHOT_FORMATS)
        if not found:
            logger.error("Screenshot paths not found on file system by patterns:\n%s", "\n".join(patterns))
            return CleanupOutcome.NOT_FOUND

        logger.debug("Found screen paths on file system:\n%s", "\n".join(found))

        unused = find_unused(found, used_ref_paths)
        if not unused:
            logger.info("Unused screenshots not found by patterns: %s", ",".join(patterns))
            return CleanupOutcome.NO_UNUSED

        logger.debug("Found unused screenshots:\n%s", "\n".join(unused))

        sizes = await self._map(self.fs.size, unused)
        logger.info("Found %d unused screenshots with total size %s", len(unused), decimal(sum(sizes)))

        if await self.prompter.ask("show", "Show list of unused screenshots?"):
            logger.info("List of unused screenshots:\n%s", "\n".join(unused))

        if not await self.prompter.ask("remove", "Remove unused screenshots?"):
            logger.info("Deletion of unused screenshots was canceled")
            return CleanupOutcome.CANCELLED

        await self._map(self.fs.unlink, unused)
        logger.info("Deletion of unused screenshots was succeeded")
        return CleanupOutcome.REMOVED

    async def _map(self, fn: Callable[[str], T], paths: list[str]) -> list[T]:
        semaphore = asyncio.Semaphore(MAX_PARALLEL_FS_OPS)

        async def _one(path: str) -> T:
            async with semaphore:
                return await asyncio.to_thread(fn, path)

        return list(await asyncio.gather(*(_one(p) for p in paths)))
