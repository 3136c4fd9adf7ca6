"""Error taxonomy for process orchestration and review runs."""

from __future__ import annotations

from .models import ProcessInvocation


class ProcessError(RuntimeError):
    """Base class for failures of a single external process invocation."""

    def __init__(self, invocation: ProcessInvocation, message: str) -> None:
        super().__init__(message)
        self.invocation = invocation


class ProcessSpawnError(ProcessError):
    """Raised when the executable cannot be launched at all."""

    def __init__(self, invocation: ProcessInvocation, cause: OSError) -> None:
        super().__init__(
            invocation,
            f"Unable to launch '{invocation.command}': {cause.strerror or cause}",
        )
        self.cause = cause


class ProcessExitError(ProcessError):
    """Raised when a process exits with a non-zero status."""

    def __init__(
        self,
        invocation: ProcessInvocation,
        exit_code: int,
        *,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        detail = stderr.strip() or "no stderr output"
        super().__init__(
            invocation,
            f"'{invocation.command}' exited with status {exit_code}: {detail}",
        )
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class ProcessTimeoutError(ProcessError):
    """Raised when a process does not exit within its time budget."""

    def __init__(self, invocation: ProcessInvocation, timeout: float) -> None:
        super().__init__(
            invocation,
            f"'{invocation.command}' timed out after {timeout:g} seconds",
        )
        self.timeout = timeout


class ProcessCancelledError(ProcessError):
    """Raised when a cancellation token fires while a process is running."""

    def __init__(self, invocation: ProcessInvocation) -> None:
        super().__init__(invocation, f"'{invocation.command}' was cancelled")


class ArgumentOverflowError(RuntimeError):
    """Signals that a payload did not fit in the process argument vector."""


class AnalyzerUnavailableError(RuntimeError):
    """Raised when an analyzer strategy cannot run in the current workspace."""


class ReviewError(RuntimeError):
    """Single caller-facing failure of a review run."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Review failed while {stage}: {cause}")
        self.stage = stage


__all__ = [
    "AnalyzerUnavailableError",
    "ArgumentOverflowError",
    "ProcessCancelledError",
    "ProcessError",
    "ProcessExitError",
    "ProcessSpawnError",
    "ProcessTimeoutError",
    "ReviewError",
]
