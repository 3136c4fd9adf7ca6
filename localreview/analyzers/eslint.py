"""ESLint strategy."""

from __future__ import annotations

from typing import List, Sequence

from ..models import Finding
from .base import AnalysisContext, CommandAnalyzer, as_operand
from .parsers import parse_eslint_json


class EslintAnalyzer(CommandAnalyzer):
    """Runs ESLint with the JSON formatter when the workspace carries an ESLint config."""

    name = "eslint"
    findings_exit_codes = (1,)

    CONFIG_FILES: Sequence[str] = (
        "eslint.config.js",
        "eslint.config.mjs",
        "eslint.config.cjs",
        "eslint.config.ts",
        ".eslintrc",
        ".eslintrc.js",
        ".eslintrc.cjs",
        ".eslintrc.json",
        ".eslintrc.yaml",
        ".eslintrc.yml",
    )

    def is_feasible(self, context: AnalysisContext) -> bool:
        return any((context.root / name).is_file() for name in self.CONFIG_FILES)

    async def analyze(self, context: AnalysisContext) -> List[Finding]:
        files = [as_operand(path) for path in context.changes]
        result = await self._execute(["--format", "json", *files], context)
        return parse_eslint_json(result.stdout, context.root)
