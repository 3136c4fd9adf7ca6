"""TypeScript compiler (type-check only) strategy."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import AnalyzerUnavailableError
from ..models import Finding
from .base import AnalysisContext, CommandAnalyzer
from .parsers import parse_tsc_output


class TypeScriptAnalyzer(CommandAnalyzer):
    """Runs ``tsc --noEmit`` project-wide when TypeScript files changed."""

    name = "typescript"
    # tsc exits 1 or 2 when it emitted diagnostics, depending on the version.
    findings_exit_codes = (1, 2)

    CONFIG_FILE = "tsconfig.json"
    SOURCE_SUFFIXES: Sequence[str] = (".ts", ".tsx")

    def is_feasible(self, context: AnalysisContext) -> bool:
        if not (context.root / self.CONFIG_FILE).is_file():
            return False
        return any(path.endswith(tuple(self.SOURCE_SUFFIXES)) for path in context.changes)

    async def analyze(self, context: AnalysisContext) -> List[Finding]:
        result = await self._execute(["--noEmit", "--pretty", "false"], context)
        findings = parse_tsc_output(result.stdout)
        if result.exit_code and not findings:
            # A failing exit without diagnostics means tsc itself never ran.
            detail = (result.stderr or result.stdout).strip() or "no output"
            raise AnalyzerUnavailableError(
                f"{self.name} exited with status {result.exit_code} without diagnostics: {detail}"
            )
        return findings
