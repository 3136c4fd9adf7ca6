"""Renders the reviewer prompt from an analysis payload."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from ..models import AnalysisPayload

DEFAULT_TEMPLATE = "review.j2"
_TEMPLATES_DIR = Path(__file__).with_name("templates")


class PromptError(RuntimeError):
    """Raised when the review template cannot be loaded or rendered."""


class PromptBuilder:
    """Serialises an :class:`AnalysisPayload` into the reviewer's instructional template.

    The template text is treated as opaque; it receives ``payload`` (the dict
    form), ``payload_json`` (its JSON serialisation), ``diff`` and ``findings``.
    A custom template file replaces the built-in one.
    """

    def __init__(self, template_path: Path | None = None) -> None:
        directories: List[str] = []
        if template_path is not None:
            directories.append(str(template_path.parent))
            self.template_name = template_path.name
        else:
            self.template_name = DEFAULT_TEMPLATE
        directories.append(str(_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def build(self, payload: AnalysisPayload) -> str:
        data = payload.to_dict()
        try:
            template = self._env.get_template(self.template_name)
        except TemplateNotFound as exc:
            raise PromptError(f"Review template '{self.template_name}' not found") from exc
        return template.render(
            payload=data,
            payload_json=json.dumps(data, indent=2, ensure_ascii=False),
            diff=payload.diff,
            findings=data["findings"],
        )


__all__ = ["DEFAULT_TEMPLATE", "PromptBuilder", "PromptError"]
