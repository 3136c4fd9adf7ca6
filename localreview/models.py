"""Core data models shared across localreview components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

ChangeSet = Tuple[str, ...]


class Severity(str, Enum):
    """Normalised severity of a static-analysis finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FindingSource(str, Enum):
    """Analyzer that produced a finding."""

    ESLINT = "eslint"
    JSHINT = "jshint"
    TYPESCRIPT = "typescript"


@dataclass(frozen=True)
class Finding:
    """One normalised static-analysis diagnostic."""

    file_path: str
    line: int
    column: int
    message: str
    severity: Severity
    source: FindingSource

    def __post_init__(self) -> None:
        if not self.file_path:
            raise ValueError("Finding requires a non-empty file_path")
        if not self.message:
            raise ValueError("Finding requires a non-empty message")
        if self.line < 0 or self.column < 0:
            raise ValueError("Finding line and column must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity.value,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class AnalysisPayload:
    """Diff and findings bundle handed to the external reviewer."""

    diff: str
    findings: Tuple[Finding, ...] = ()

    @classmethod
    def build(cls, diff: str, findings: Sequence[Finding]) -> "AnalysisPayload":
        return cls(diff=diff, findings=tuple(findings))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diff": self.diff,
            "findings": [finding.to_dict() for finding in self.findings],
        }


@dataclass(frozen=True)
class ProcessInvocation:
    """Describes a single external process call."""

    command: str
    args: Tuple[str, ...] = ()
    stdin: Optional[str] = None
    timeout: Optional[float] = None
    cwd: Optional[str] = None

    def describe(self) -> str:
        """Return a short, log-friendly rendering of the command line."""
        parts = [self.command, *self.args]
        rendered = " ".join(_shorten(part) for part in parts)
        if self.stdin is not None:
            rendered += f" <stdin:{len(self.stdin)} chars>"
        return rendered


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a process that exited successfully."""

    invocation: ProcessInvocation
    stdout: str
    stderr: str = ""
    exit_code: int = 0


def _shorten(value: str, limit: int = 80) -> str:
    if len(value) <= limit:
        return value
    return f"{value[:limit]}…({len(value)} chars)"


__all__ = [
    "AnalysisPayload",
    "ChangeSet",
    "Finding",
    "FindingSource",
    "ProcessInvocation",
    "ProcessResult",
    "Severity",
]
