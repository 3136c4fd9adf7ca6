"""JSHint strategy."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Callable, List, Optional, Sequence

from ..models import Finding
from ..process.transport import Runner
from .base import AnalysisContext, CommandAnalyzer, as_operand
from .parsers import parse_jshint_output

Which = Callable[[str], Optional[str]]


class JshintAnalyzer(CommandAnalyzer):
    """Runs JSHint once per changed file when the executable is on PATH."""

    name = "jshint"
    findings_exit_codes = (1, 2)

    def __init__(
        self,
        runner: Runner,
        *,
        command: Sequence[str] = ("jshint",),
        timeout: float = 10.0,
        workers: int = 1,
        which: Which = shutil.which,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(runner, command=command, timeout=timeout, logger=logger)
        self.workers = max(1, workers)
        self._which = which

    def is_feasible(self, context: AnalysisContext) -> bool:
        return self._which(self.command[0]) is not None

    async def analyze(self, context: AnalysisContext) -> List[Finding]:
        if self.workers == 1:
            findings: List[Finding] = []
            for path in context.changes:
                findings.extend(await self._analyze_file(path, context))
            return findings

        semaphore = asyncio.Semaphore(self.workers)

        async def _bounded(path: str) -> List[Finding]:
            async with semaphore:
                return await self._analyze_file(path, context)

        tasks = [asyncio.create_task(_bounded(path)) for path in context.changes]
        try:
            batches = await asyncio.gather(*tasks)
        except BaseException:
            # One file failed the strategy; stop the runs still queued or in flight.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return [finding for batch in batches for finding in batch]

    async def _analyze_file(self, path: str, context: AnalysisContext) -> List[Finding]:
        self.logger.debug("Running jshint on %s", path)
        result = await self._execute([as_operand(path)], context)
        return parse_jshint_output(result.stdout)
