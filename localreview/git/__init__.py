"""Version-control helpers."""

from .workspace import ChangeSetCollector, GitWorkspace

__all__ = ["ChangeSetCollector", "GitWorkspace"]
