"""Scripted process runner double for pipeline tests."""

from __future__ import annotations

import errno
import os
from typing import Callable, List, Sequence, Tuple, Union

from localreview.errors import ProcessExitError, ProcessSpawnError
from localreview.models import ProcessInvocation, ProcessResult

Outcome = Union[str, ProcessResult, BaseException, Callable[[ProcessInvocation], object]]


class ScriptedRunner:
    """Replays canned outcomes for commands instead of spawning processes.

    ``when(command, *tokens)`` matches an invocation of ``command`` whose
    arguments contain every token. Unmatched invocations fail like a missing
    executable.
    """

    def __init__(self) -> None:
        self.calls: List[ProcessInvocation] = []
        self._rules: List[Tuple[str, Tuple[str, ...], Outcome]] = []

    def when(self, command: str, *tokens: str) -> "_RuleBuilder":
        return _RuleBuilder(self, command, tokens)

    def calls_to(self, command: str) -> List[ProcessInvocation]:
        return [call for call in self.calls if call.command == command]

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        stdin: str | None = None,
        timeout: float | None = None,
        cwd: str | os.PathLike[str] | None = None,
        cancel_token: object | None = None,
    ) -> ProcessResult:
        invocation = ProcessInvocation(
            command=command,
            args=tuple(args),
            stdin=stdin,
            timeout=timeout,
            cwd=str(cwd) if cwd is not None else None,
        )
        self.calls.append(invocation)
        for rule_command, tokens, outcome in self._rules:
            if rule_command != command or not all(token in invocation.args for token in tokens):
                continue
            if callable(outcome) and not isinstance(outcome, BaseException):
                outcome = outcome(invocation)
            if isinstance(outcome, BaseException):
                raise outcome
            if isinstance(outcome, ProcessResult):
                return outcome
            return ProcessResult(invocation=invocation, stdout=str(outcome))
        raise ProcessSpawnError(
            invocation, FileNotFoundError(errno.ENOENT, "No such file or directory", command)
        )


class _RuleBuilder:
    def __init__(self, runner: ScriptedRunner, command: str, tokens: Tuple[str, ...]) -> None:
        self._runner = runner
        self._command = command
        self._tokens = tokens

    def returns(self, stdout: str) -> ScriptedRunner:
        self._runner._rules.append((self._command, self._tokens, stdout))
        return self._runner

    def raises(self, outcome: Outcome) -> ScriptedRunner:
        self._runner._rules.append((self._command, self._tokens, outcome))
        return self._runner

    def exits(self, exit_code: int, *, stdout: str = "", stderr: str = "") -> ScriptedRunner:
        def _fail(invocation: ProcessInvocation) -> ProcessExitError:
            return ProcessExitError(invocation, exit_code, stdout=stdout, stderr=stderr)

        self._runner._rules.append((self._command, self._tokens, _fail))
        return self._runner


def git_runner(changed: str, *, diff: str = "", has_head: bool = True) -> ScriptedRunner:
    """Return a runner scripted with the git calls the change collector makes.

    ``changed`` lists one path per line; it is replayed NUL-separated the way
    ``git diff --name-only -z`` prints it.
    """
    runner = ScriptedRunner()
    if has_head:
        runner.when("git", "rev-parse").returns("0123abcd\n")
    else:
        runner.when("git", "rev-parse").exits(1)
    runner.when("git", "diff", "--name-only").returns(
        "".join(f"{path}\0" for path in changed.splitlines())
    )
    runner.when("git", "diff", "--no-color").returns(diff)
    return runner


__all__ = ["ScriptedRunner", "git_runner"]
