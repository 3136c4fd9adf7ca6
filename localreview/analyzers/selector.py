"""Priority-ordered selection and execution of a single static analyzer."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import AnalyzerConfig
from ..errors import ProcessCancelledError
from ..logging import get_logger
from ..models import ChangeSet, Finding
from ..process.runner import CancellationToken
from ..process.transport import Runner
from .base import AnalysisContext, AnalyzerStrategy
from .eslint import EslintAnalyzer
from .jshint import JshintAnalyzer, Which
from .typescript import TypeScriptAnalyzer


@dataclass(frozen=True)
class AnalysisReport:
    """Findings plus the name of the strategy that produced them (``None`` when skipped)."""

    strategy: Optional[str]
    findings: Tuple[Finding, ...] = ()


class AnalyzerSelector:
    """Runs the first feasible strategy, falling through to the next one on failure.

    Feasibility alone decides which strategies are candidates; execution
    failures only move on to the next candidate. Output from different
    strategies is never merged.
    """

    def __init__(
        self,
        strategies: Iterable[AnalyzerStrategy],
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.strategies: List[AnalyzerStrategy] = list(strategies)
        self.logger = logger or get_logger("analyzers")

    async def run(
        self,
        root: Path,
        changes: ChangeSet,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> AnalysisReport:
        context = AnalysisContext(root=root, changes=tuple(changes), cancel_token=cancel_token)
        attempted: List[str] = []
        for strategy in self.strategies:
            if not strategy.is_feasible(context):
                self.logger.debug("Analyzer %s is not feasible for %s", strategy.name, root)
                continue
            attempted.append(strategy.name)
            self.logger.info("Running %s on %d changed file(s)", strategy.name, len(context.changes))
            try:
                findings = await strategy.analyze(context)
            except ProcessCancelledError:
                raise
            except Exception as exc:
                self.logger.warning("%s failed, trying next analyzer: %s", strategy.name, exc)
                continue
            self.logger.info("%s reported %d finding(s)", strategy.name, len(findings))
            return AnalysisReport(strategy=strategy.name, findings=tuple(findings))

        if attempted:
            self.logger.warning(
                "Static analysis skipped: every feasible analyzer failed (%s)",
                ", ".join(attempted),
            )
        else:
            self.logger.warning("Static analysis skipped: no analyzer is available")
        return AnalysisReport(strategy=None)


def build_default_selector(
    runner: Runner,
    config: AnalyzerConfig | None = None,
    *,
    which: Which = shutil.which,
    logger: logging.Logger | None = None,
) -> AnalyzerSelector:
    """Return a selector with the built-in strategies in priority order."""
    config = config or AnalyzerConfig()
    enabled = set(config.enabled)
    candidates: Sequence[AnalyzerStrategy] = (
        EslintAnalyzer(
            runner,
            command=config.eslint.command,
            timeout=config.eslint.timeout,
            logger=logger,
        ),
        JshintAnalyzer(
            runner,
            command=config.jshint.command,
            timeout=config.jshint.timeout,
            workers=config.jshint.workers,
            which=which,
            logger=logger,
        ),
        TypeScriptAnalyzer(
            runner,
            command=config.typescript.command,
            timeout=config.typescript.timeout,
            logger=logger,
        ),
    )
    return AnalyzerSelector(
        [strategy for strategy in candidates if strategy.name in enabled],
        logger=logger,
    )


__all__ = ["AnalysisReport", "AnalyzerSelector", "build_default_selector"]
