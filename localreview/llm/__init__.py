"""External AI reviewer adapters."""

from .reviewer import ReviewerClient

__all__ = ["ReviewerClient"]
