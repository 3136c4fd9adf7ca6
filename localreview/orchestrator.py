"""Pipeline orchestration for reviewing local changes."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from .analyzers import AnalyzerSelector, build_default_selector
from .config import ReviewConfig, load_config
from .errors import ReviewError
from .git import ChangeSetCollector, GitWorkspace
from .llm import ReviewerClient
from .logging import get_logger
from .models import AnalysisPayload
from .process import ArgumentTransport, CancellationToken, ProcessRunner
from .prompting import PromptBuilder

EMPTY_RESULT: Dict[str, object] = {
    "summary": "No relevant files changed.",
    "assessment": "",
    "findings": [],
}


def empty_result() -> str:
    """Return the canonical result for a run with nothing to review."""
    return json.dumps(EMPTY_RESULT)


class ReviewState(str, Enum):
    IDLE = "idle"
    COLLECTING_CHANGES = "collecting_changes"
    NO_CHANGES = "no_changes"
    ANALYZING = "analyzing"
    FETCHING_DIFF = "fetching_diff"
    BUILDING_PAYLOAD = "building_payload"
    INVOKING_REVIEWER = "invoking_reviewer"
    DONE = "done"
    FAILED = "failed"


_STAGE_DESCRIPTIONS: Dict[ReviewState, str] = {
    ReviewState.COLLECTING_CHANGES: "collecting changed files",
    ReviewState.ANALYZING: "running static analysis",
    ReviewState.FETCHING_DIFF: "fetching the diff",
    ReviewState.BUILDING_PAYLOAD: "building the reviewer prompt",
    ReviewState.INVOKING_REVIEWER: "invoking the reviewer",
}


class ReviewOrchestrator:
    """Coordinates change collection, static analysis and the external reviewer."""

    def __init__(
        self,
        root: str | Path = ".",
        *,
        config: ReviewConfig | None = None,
        runner: ProcessRunner | None = None,
        workspace: GitWorkspace | None = None,
        collector: ChangeSetCollector | None = None,
        selector: AnalyzerSelector | None = None,
        prompt_builder: PromptBuilder | None = None,
        reviewer: ReviewerClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.config = config or load_config(self.root)
        self.logger = logger or get_logger("orchestrator")
        self.runner = runner or ProcessRunner(logger=logger)
        self.workspace = workspace or GitWorkspace(self.root, self.runner)
        self.collector = collector or ChangeSetCollector(
            self.workspace, extensions=self.config.extensions, logger=logger
        )
        self.selector = selector or build_default_selector(
            self.runner, self.config.analyzers, logger=logger
        )
        self.prompt_builder = prompt_builder or PromptBuilder(self.config.prompt_template)
        self.reviewer = reviewer or ReviewerClient(
            ArgumentTransport(self.runner, logger=logger),
            executable=self.config.reviewer.executable,
            options=self.config.reviewer.args,
            timeout=self.config.reviewer.timeout,
            logger=logger,
        )
        self.state = ReviewState.IDLE
        self.history: List[ReviewState] = [ReviewState.IDLE]
        self.payload: Optional[AnalysisPayload] = None

    async def review(self, *, cancel_token: CancellationToken | None = None) -> str:
        """Review local changes and return the reviewer's raw JSON output.

        Returns the canonical empty result without running any analyzer or the
        reviewer when no eligible file changed. Any unrecovered failure raises
        :class:`ReviewError`; partial results are never returned.
        """
        self.history = []
        self.payload = None
        self._enter(ReviewState.IDLE)
        self.logger.info("Starting review of %s", self.root)
        try:
            self._enter(ReviewState.COLLECTING_CHANGES)
            changes = await self.collector.collect(cancel_token=cancel_token)
            if not changes:
                self._enter(ReviewState.NO_CHANGES)
                self.logger.info("No relevant files changed")
                return empty_result()
            self.logger.debug("Changed files: %s", ", ".join(changes))

            self._enter(ReviewState.ANALYZING)
            report = await self.selector.run(self.root, changes, cancel_token=cancel_token)

            self._enter(ReviewState.FETCHING_DIFF)
            diff = await self.workspace.diff(cancel_token=cancel_token)

            self._enter(ReviewState.BUILDING_PAYLOAD)
            self.payload = AnalysisPayload.build(diff, report.findings)
            prompt = self.prompt_builder.build(self.payload)

            self._enter(ReviewState.INVOKING_REVIEWER)
            output = await self.reviewer.review(
                prompt, cwd=self.root, cancel_token=cancel_token
            )
        except Exception as exc:
            stage = _STAGE_DESCRIPTIONS.get(self.state, self.state.value)
            self._enter(ReviewState.FAILED)
            self.logger.error("Review failed while %s: %s", stage, exc)
            raise ReviewError(stage, exc) from exc

        self._enter(ReviewState.DONE)
        self.logger.info("Review finished (%d chars of reviewer output)", len(output))
        return output

    def run_review(self, *, cancel_token: CancellationToken | None = None) -> str:
        """Synchronous wrapper around :meth:`review` for non-async callers."""
        return asyncio.run(self.review(cancel_token=cancel_token))

    def _enter(self, state: ReviewState) -> None:
        self.logger.debug("Review state: %s", state.value)
        self.state = state
        self.history.append(state)


__all__ = [
    "EMPTY_RESULT",
    "ReviewOrchestrator",
    "ReviewState",
    "empty_result",
]
