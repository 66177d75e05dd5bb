"""Run-scoped state shared by the coordinator, the workers and the pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field

from screenshots_cleaner.models.config import PluginConfig


class RunContext(BaseModel):
    config: PluginConfig = Field(default_factory=PluginConfig)
    run_clean_screenshots: bool = False  # set once clean-screenshots starts
    screen_patterns: list[str] = Field(default_factory=list)
    used_ref_paths: list[str] = Field(default_factory=list)  # appended by test-end handlers only
    expected_reports: int = 0
    received_reports: int = 0

    @property
    def missing_reports(self) -> int:
        return max(self.expected_reports - self.received_reports, 0)
