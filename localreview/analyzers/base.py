"""Base classes for static analyzer strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import AnalyzerUnavailableError, ProcessExitError, ProcessSpawnError
from ..logging import get_logger
from ..models import ChangeSet, Finding, ProcessResult
from ..process.runner import CancellationToken
from ..process.transport import Runner


@dataclass(frozen=True)
class AnalysisContext:
    """Workspace and change set a strategy is asked to analyse."""

    root: Path
    changes: ChangeSet
    cancel_token: Optional[CancellationToken] = None


class AnalyzerStrategy(ABC):
    """Contract for one external analyzer: a feasibility probe plus an invocation."""

    name: str = "analyzer"

    @abstractmethod
    def is_feasible(self, context: AnalysisContext) -> bool:
        """Return True when the tool can run for this workspace at all."""

    @abstractmethod
    async def analyze(self, context: AnalysisContext) -> List[Finding]:
        """Run the tool and return its normalised findings."""


class CommandAnalyzer(AnalyzerStrategy):
    """Strategy backed by an external command line tool."""

    # Exit codes the tool uses to report "ran fine, found problems".
    findings_exit_codes: Tuple[int, ...] = ()

    def __init__(
        self,
        runner: Runner,
        *,
        command: Sequence[str],
        timeout: float,
        logger: logging.Logger | None = None,
    ) -> None:
        if not command:
            raise ValueError(f"{self.name} command must not be empty")
        self.runner = runner
        self.command = tuple(command)
        self.timeout = timeout
        self.logger = logger or get_logger(f"analyzers.{self.name}")

    async def _execute(self, args: Sequence[str], context: AnalysisContext) -> ProcessResult:
        """Run the tool, treating findings exit codes as success."""
        executable, *base_args = self.command
        try:
            result = await self.runner.run(
                executable,
                [*base_args, *args],
                timeout=self.timeout,
                cwd=context.root,
                cancel_token=context.cancel_token,
            )
        except ProcessSpawnError as exc:
            raise AnalyzerUnavailableError(f"{self.name} is not runnable: {exc}") from exc
        except ProcessExitError as exc:
            if exc.exit_code in self.findings_exit_codes:
                return ProcessResult(
                    invocation=exc.invocation,
                    stdout=exc.stdout,
                    stderr=exc.stderr,
                    exit_code=exc.exit_code,
                )
            raise
        return result


def as_operand(path: str) -> str:
    """Return ``path`` in a form a tool cannot mistake for an option."""
    return f"./{path}" if path.startswith("-") else path
