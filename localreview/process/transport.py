"""Argument-length aware delivery of large payloads to external processes."""

from __future__ import annotations

import errno
import logging
import os
from typing import Optional, Protocol, Sequence

from ..errors import ArgumentOverflowError, ProcessError, ProcessSpawnError
from ..logging import get_logger
from ..models import ProcessResult
from .runner import CancellationToken

_OVERFLOW_PHRASE = "argument list too long"
# ERROR_FILENAME_EXCED_RANGE: Windows rejects command lines above 32767 chars.
_WINDOWS_OVERFLOW_CODE = 206


class Runner(Protocol):
    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        stdin: str | None = None,
        timeout: float | None = None,
        cwd: str | os.PathLike[str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessResult: ...


def is_argument_overflow(error: BaseException) -> bool:
    """Return True when ``error`` (or its cause chain) reports an oversized argument vector."""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, OSError):
            if current.errno == errno.E2BIG:
                return True
            if getattr(current, "winerror", None) == _WINDOWS_OVERFLOW_CODE:
                return True
        if isinstance(current, ProcessSpawnError) and is_argument_overflow(current.cause):
            return True
        if _OVERFLOW_PHRASE in str(current).lower():
            return True
        current = current.__cause__
    return False


class ArgumentTransport:
    """Passes a payload as a single argument, falling back to stdin when it does not fit."""

    def __init__(self, runner: Runner, *, logger: logging.Logger | None = None) -> None:
        self.runner = runner
        self.logger = logger or get_logger("transport")

    async def invoke(
        self,
        command: str,
        payload: str,
        *,
        options: Sequence[str] = (),
        timeout: float | None = None,
        cwd: str | os.PathLike[str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessResult:
        """Run ``command`` with ``payload`` appended to ``options`` as the last argument.

        If the platform rejects the argument vector as too long the same call is
        repeated with ``payload`` written to stdin, newline-terminated, and only
        ``options`` on the command line. Every other failure propagates unchanged.
        """
        try:
            return await self._invoke_with_argument(
                command, payload, options, timeout=timeout, cwd=cwd, cancel_token=cancel_token
            )
        except ArgumentOverflowError as overflow:
            self.logger.warning("%s; retrying with the payload on stdin", overflow)

        return await self.runner.run(
            command,
            list(options),
            stdin=payload if payload.endswith("\n") else f"{payload}\n",
            timeout=timeout,
            cwd=cwd,
            cancel_token=cancel_token,
        )

    async def _invoke_with_argument(
        self,
        command: str,
        payload: str,
        options: Sequence[str],
        *,
        timeout: float | None,
        cwd: str | os.PathLike[str] | None,
        cancel_token: CancellationToken | None,
    ) -> ProcessResult:
        try:
            return await self.runner.run(
                command,
                [*options, payload],
                timeout=timeout,
                cwd=cwd,
                cancel_token=cancel_token,
            )
        except ProcessError as exc:
            if not is_argument_overflow(exc):
                raise
            raise ArgumentOverflowError(
                f"Payload of {len(payload)} chars exceeds the argument limit for '{command}'"
            ) from exc


__all__ = ["ArgumentTransport", "Runner", "is_argument_overflow"]
