"""Adapter around the external AI reviewer CLI."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from ..logging import get_logger
from ..process.runner import CancellationToken
from ..process.transport import ArgumentTransport


class ReviewerClient:
    """Sends the rendered prompt to the reviewer executable and relays its stdout.

    The reviewer's output is returned verbatim; it is never parsed here.
    """

    DEFAULT_EXECUTABLE = "gemini"
    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        transport: ArgumentTransport,
        *,
        executable: str = DEFAULT_EXECUTABLE,
        options: Sequence[str] = (),
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.transport = transport
        self.executable = executable
        self.options = tuple(options)
        self.timeout = timeout
        self.logger = logger or get_logger("reviewer")

    async def review(
        self,
        prompt: str,
        *,
        cwd: str | os.PathLike[str] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        self.logger.info(
            "Invoking reviewer '%s' with a %d char prompt", self.executable, len(prompt)
        )
        result = await self.transport.invoke(
            self.executable,
            prompt,
            options=self.options,
            timeout=self.timeout,
            cwd=cwd,
            cancel_token=cancel_token,
        )
        return result.stdout
