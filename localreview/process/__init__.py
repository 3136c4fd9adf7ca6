"""External process execution primitives."""

from .runner import CancellationToken, ProcessRunner, Settlement
from .transport import ArgumentTransport, is_argument_overflow

__all__ = [
    "ArgumentTransport",
    "CancellationToken",
    "ProcessRunner",
    "Settlement",
    "is_argument_overflow",
]
