"""Asynchronous external process execution with exactly-once settlement."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Generic, List, Mapping, Optional, Sequence, TypeVar

from ..errors import (
    ProcessCancelledError,
    ProcessError,
    ProcessExitError,
    ProcessSpawnError,
    ProcessTimeoutError,
)
from ..logging import get_logger
from ..models import ProcessInvocation, ProcessResult

_READ_CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


class Settlement(Generic[T]):
    """One-shot completion gate shared by every resolution path of an invocation.

    The first call to :meth:`resolve` or :meth:`reject` wins; later calls are
    ignored and return ``False``.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    async def wait(self) -> T:
        return await self._future


class CancellationToken:
    """Cooperative cancellation signal shared across a review run.

    ``cancel`` may be called from any thread; registered callbacks run on the
    cancelling thread and must therefore be thread-safe.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Invoke ``callback`` on cancellation and return a function that unregisters it."""
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def _unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unregister


class ProcessRunner:
    """Spawns executables with argument vectors (never through a shell)."""

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.logger = logger or get_logger("process")
        self._env = dict(env) if env is not None else None

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        stdin: str | None = None,
        timeout: float | None = None,
        cwd: str | os.PathLike[str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessResult:
        """Run ``command`` and return its captured output once it exits with status 0.

        Raises :class:`ProcessSpawnError`, :class:`ProcessExitError`,
        :class:`ProcessTimeoutError` or :class:`ProcessCancelledError`.
        """
        invocation = ProcessInvocation(
            command=command,
            args=tuple(args),
            stdin=stdin,
            timeout=timeout,
            cwd=str(Path(cwd)) if cwd is not None else None,
        )
        if cancel_token is not None and cancel_token.cancelled:
            raise ProcessCancelledError(invocation)

        self.logger.debug("Spawning %s", invocation.describe())
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *invocation.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=invocation.cwd,
                env=self._env,
            )
        except OSError as exc:
            raise ProcessSpawnError(invocation, exc) from exc

        loop = asyncio.get_running_loop()
        settlement: Settlement[ProcessResult] = Settlement()

        def _abort(error: ProcessError) -> None:
            if settlement.reject(error):
                self.logger.warning("%s; terminating pid %s", error, process.pid)
                _terminate(process)

        timer: Optional[asyncio.TimerHandle] = None
        if timeout is not None:
            timer = loop.call_later(
                timeout, lambda: _abort(ProcessTimeoutError(invocation, timeout))
            )

        unregister: Optional[Callable[[], None]] = None
        if cancel_token is not None:
            unregister = cancel_token.register(
                lambda: loop.call_soon_threadsafe(_abort, ProcessCancelledError(invocation))
            )

        collector = asyncio.create_task(self._collect(process, invocation, settlement))
        try:
            return await settlement.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if unregister is not None:
                unregister()
            if not collector.done():
                # Settled before the process exited; stop reading its pipes.
                _terminate(process)
                collector.cancel()

    async def _collect(
        self,
        process: asyncio.subprocess.Process,
        invocation: ProcessInvocation,
        settlement: Settlement[ProcessResult],
    ) -> None:
        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []
        try:
            await asyncio.gather(
                _feed(process, invocation.stdin),
                _pump(process.stdout, stdout_chunks, settlement),
                _pump(process.stderr, stderr_chunks, settlement),
            )
            exit_code = await process.wait()
        except OSError as exc:
            settlement.reject(ProcessSpawnError(invocation, exc))
            return

        stdout = _decode(stdout_chunks)
        stderr = _decode(stderr_chunks)
        if exit_code != 0:
            settlement.reject(
                ProcessExitError(invocation, exit_code, stdout=stdout, stderr=stderr)
            )
            return

        result = ProcessResult(
            invocation=invocation, stdout=stdout, stderr=stderr, exit_code=exit_code
        )
        if settlement.resolve(result) and stderr.strip():
            self.logger.warning(
                "'%s' succeeded but wrote to stderr: %s", invocation.command, stderr.strip()
            )


async def _feed(process: asyncio.subprocess.Process, payload: str | None) -> None:
    if process.stdin is None:
        return
    try:
        if payload:
            process.stdin.write(payload.encode("utf-8"))
            await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # Process exited without consuming its input; the exit status decides the outcome.
        pass
    finally:
        process.stdin.close()


async def _pump(
    stream: asyncio.StreamReader | None,
    sink: List[bytes],
    settlement: Settlement[ProcessResult],
) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            return
        if not settlement.settled:
            sink.append(chunk)


def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        pass


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


__all__ = ["CancellationToken", "ProcessRunner", "Settlement"]
