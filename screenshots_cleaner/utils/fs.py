"""File system access used by the cleanup pipeline."""

from __future__ import annotations

import glob
import logging
import os
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    def expand(self, patterns: list[str], formats: Iterable[str]) -> list[str]:
        """Resolve glob patterns to existing files with one of ``formats``."""

        ...

    def size(self, path: str) -> int:
        ...

    def unlink(self, path: str) -> None:
        ...


class LocalFileSystem:
    """Local disk implementation of ``FileSystem``."""

    def expand(self, patterns: list[str], formats: Iterable[str] = (".png",)) -> list[str]:
        """Expand patterns into absolute file paths, deduplicated in first-seen order.

        A match that is a directory contributes every file below it. Only the
        extension's exact case is accepted, so ``Logo.PNG`` is not a ``.png``.
        """
        extensions = tuple(formats)
        found: dict[str, None] = {}
        for pattern in patterns:
            walked: list[str] = []
            for match in sorted(os.path.normpath(m) for m in glob.glob(pattern, recursive=True)):
                # already listed by the walk of an enclosing directory
                if any(match.startswith(root + os.sep) for root in walked):
                    continue
                if os.path.isdir(match):
                    walked.append(match)
                for path in self._walk(match):
                    if path.endswith(extensions):
                        found[os.path.abspath(path)] = None
        return list(found)

    def _walk(self, path: str) -> list[str]:
        if os.path.isfile(path):
            return [path]
        files = []
        for root, _dirs, names in os.walk(path):
            files.extend(os.path.join(root, name) for name in sorted(names))
        return files

    def size(self, path: str) -> int:
        return os.stat(path).st_size

    def unlink(self, path: str) -> None:
        os.unlink(path)
        logger.debug("Removed %s", path)
