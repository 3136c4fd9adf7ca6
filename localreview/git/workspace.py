"""Git access for uncommitted changes."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Sequence

from ..config import DEFAULT_EXTENSIONS
from ..errors import ProcessExitError
from ..logging import get_logger
from ..models import ChangeSet
from ..process.runner import CancellationToken
from ..process.transport import Runner

DIFF_BASE = "HEAD"


class GitWorkspace:
    """Runs the git commands needed to inspect working tree changes against HEAD."""

    GIT_TIMEOUT = 30.0
    # Keep non-ASCII paths verbatim instead of C-quoting them.
    _GIT_OPTIONS: Sequence[str] = ("-c", "core.quotepath=off")

    def __init__(
        self,
        root: Path,
        runner: Runner,
        *,
        executable: str = "git",
        timeout: float | None = None,
    ) -> None:
        self.root = root
        self.runner = runner
        self.executable = executable
        self.timeout = timeout or self.GIT_TIMEOUT

    async def has_commits(self, *, cancel_token: CancellationToken | None = None) -> bool:
        try:
            await self._git(["rev-parse", "--verify", "--quiet", DIFF_BASE], cancel_token)
        except ProcessExitError:
            return False
        return True

    async def changed_files(self, *, cancel_token: CancellationToken | None = None) -> str:
        """Return NUL-separated ``git diff --name-only`` output for added or modified files."""
        # quotepath=off still C-quotes paths with control characters or double quotes; -z does not.
        return await self._git(
            ["diff", "--name-only", "-z", "--diff-filter=AM", DIFF_BASE], cancel_token
        )

    async def diff(self, *, cancel_token: CancellationToken | None = None) -> str:
        """Return the unified diff of the working tree against ``HEAD``."""
        return await self._git(["diff", "--no-color", "--no-ext-diff", DIFF_BASE], cancel_token)

    async def _git(self, args: Sequence[str], cancel_token: CancellationToken | None) -> str:
        result = await self.runner.run(
            self.executable,
            [*self._GIT_OPTIONS, *args],
            timeout=self.timeout,
            cwd=self.root,
            cancel_token=cancel_token,
        )
        return result.stdout


class ChangeSetCollector:
    """Determines the changed source files eligible for analysis."""

    def __init__(
        self,
        workspace: GitWorkspace,
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace = workspace
        self.extensions = frozenset(extensions)
        self.logger = logger or get_logger("git")

    async def collect(self, *, cancel_token: CancellationToken | None = None) -> ChangeSet:
        """Return added or modified files with a recognised extension, in git's order.

        An empty result (not an error) is returned when the directory is not a
        repository or has no commit to diff against.
        """
        try:
            if not await self.workspace.has_commits(cancel_token=cancel_token):
                self.logger.info("No committed history in %s; nothing to review", self.workspace.root)
                return ()
            output = await self.workspace.changed_files(cancel_token=cancel_token)
        except ProcessExitError as exc:
            self.logger.info("git could not list changes in %s: %s", self.workspace.root, exc)
            return ()
        return tuple(self.filter_paths(output.split("\0")))

    def filter_paths(self, entries: Iterable[str]) -> List[str]:
        paths: List[str] = []
        for path in entries:
            if not path.strip():
                continue
            if PurePosixPath(path).suffix in self.extensions:
                paths.append(path)
        return paths


__all__ = ["ChangeSetCollector", "DIFF_BASE", "GitWorkspace"]
