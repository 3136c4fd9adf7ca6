"""Prompt rendering for the external reviewer."""

from .builder import PromptBuilder, PromptError

__all__ = ["PromptBuilder", "PromptError"]
