"""Tests for the concrete analyzer strategies."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from localreview.analyzers import (
    AnalysisContext,
    EslintAnalyzer,
    JshintAnalyzer,
    TypeScriptAnalyzer,
)
from localreview.config import AnalyzerConfig
from localreview.errors import AnalyzerUnavailableError, ProcessExitError, ProcessTimeoutError
from localreview.models import FindingSource, ProcessInvocation, ProcessResult, Severity
from tests._fixtures.fake_runner import ScriptedRunner


def _context(root: Path, *changes: str) -> AnalysisContext:
    return AnalysisContext(root=root, changes=tuple(changes))


def _eslint(runner: ScriptedRunner) -> EslintAnalyzer:
    return EslintAnalyzer(runner, command=["npx", "eslint"], timeout=30)


def test_eslint_feasible_only_with_config(workspace: Path, scripted_runner: ScriptedRunner) -> None:
    analyzer = _eslint(scripted_runner)
    assert analyzer.is_feasible(_context(workspace, "a.js")) is False

    (workspace / ".eslintrc.json").write_text("{}", encoding="utf-8")
    assert analyzer.is_feasible(_context(workspace, "a.js")) is True


def test_eslint_flat_config_is_recognised(workspace: Path, scripted_runner: ScriptedRunner) -> None:
    (workspace / "eslint.config.mjs").write_text("export default [];\n", encoding="utf-8")
    assert _eslint(scripted_runner).is_feasible(_context(workspace, "a.ts")) is True


def test_eslint_passes_files_as_discrete_arguments(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    scripted_runner.when("npx", "eslint").returns("[]")
    changes = ("src/a b.js", "src/$(touch pwned).ts", "-rf.js")

    findings = asyncio.run(_eslint(scripted_runner).analyze(_context(workspace, *changes)))

    assert findings == []
    call = scripted_runner.calls[0]
    assert call.command == "npx"
    assert call.args == (
        "eslint",
        "--format",
        "json",
        "src/a b.js",
        "src/$(touch pwned).ts",
        "./-rf.js",
    )
    assert call.timeout == 30
    assert call.cwd == str(workspace)


def test_eslint_parses_report_from_findings_exit_code(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    report = json.dumps(
        [
            {
                "filePath": str(workspace / "src" / "a.js"),
                "messages": [{"ruleId": "semi", "severity": 2, "message": "Missing semicolon.", "line": 2, "column": 9}],
            }
        ]
    )
    scripted_runner.when("npx", "eslint").exits(1, stdout=report)

    findings = asyncio.run(_eslint(scripted_runner).analyze(_context(workspace, "src/a.js")))

    assert len(findings) == 1
    assert findings[0].file_path == "src/a.js"
    assert findings[0].source is FindingSource.ESLINT
    assert findings[0].severity is Severity.ERROR


def test_eslint_configuration_crash_is_a_failure(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    scripted_runner.when("npx", "eslint").exits(2, stderr="Oops! Something went wrong!")

    with pytest.raises(ProcessExitError):
        asyncio.run(_eslint(scripted_runner).analyze(_context(workspace, "src/a.js")))


def test_eslint_missing_executable_is_unavailable(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    with pytest.raises(AnalyzerUnavailableError):
        asyncio.run(_eslint(scripted_runner).analyze(_context(workspace, "src/a.js")))


def test_jshint_feasibility_uses_path_lookup(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    looked_up: list[str] = []

    def which(name: str) -> str | None:
        looked_up.append(name)
        return None

    analyzer = JshintAnalyzer(scripted_runner, which=which)

    assert analyzer.is_feasible(_context(workspace, "a.js")) is False
    assert looked_up == ["jshint"]


def test_jshint_runs_once_per_file_in_order(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    scripted_runner.when("jshint", "src/a.js").exits(
        2, stdout="src/a.js: line 1, col 4, Missing semicolon.\n\n1 error\n"
    )
    scripted_runner.when("jshint", "src/b.vue").returns("")
    scripted_runner.when("jshint", "src/c.js").exits(
        2, stdout="src/c.js: line 9, col 1, 'foo' is not defined.\n"
    )
    analyzer = JshintAnalyzer(scripted_runner, which=lambda name: f"/usr/bin/{name}")

    findings = asyncio.run(
        analyzer.analyze(_context(workspace, "src/a.js", "src/b.vue", "src/c.js"))
    )

    assert [call.args for call in scripted_runner.calls] == [
        ("src/a.js",),
        ("src/b.vue",),
        ("src/c.js",),
    ]
    assert all(call.timeout == 10 for call in scripted_runner.calls)
    assert [(f.file_path, f.line) for f in findings] == [("src/a.js", 1), ("src/c.js", 9)]
    assert all(f.severity is Severity.WARNING for f in findings)


def test_jshint_bounded_workers_preserve_order(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    for name in ("a", "b", "c", "d"):
        scripted_runner.when("jshint", f"{name}.js").exits(
            2, stdout=f"{name}.js: line 1, col 1, issue in {name}\n"
        )
    analyzer = JshintAnalyzer(scripted_runner, workers=3, which=lambda name: name)

    findings = asyncio.run(
        analyzer.analyze(_context(workspace, "a.js", "b.js", "c.js", "d.js"))
    )

    assert [f.file_path for f in findings] == ["a.js", "b.js", "c.js", "d.js"]


def test_jshint_timeout_on_one_file_fails_the_strategy(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    def _timeout(invocation: ProcessInvocation) -> ProcessTimeoutError:
        return ProcessTimeoutError(invocation, 10)

    scripted_runner.when("jshint", "slow.js").raises(_timeout)
    analyzer = JshintAnalyzer(scripted_runner, which=lambda name: name)

    with pytest.raises(ProcessTimeoutError):
        asyncio.run(analyzer.analyze(_context(workspace, "slow.js")))


def test_jshint_failure_with_workers_stops_remaining_files(workspace: Path) -> None:
    completed: list[str] = []

    class SlowRunner:
        async def run(self, command, args=(), *, stdin=None, timeout=None, cwd=None, cancel_token=None):
            invocation = ProcessInvocation(command=command, args=tuple(args), timeout=timeout)
            if args[0] == "a.js":
                raise ProcessTimeoutError(invocation, 10)
            await asyncio.sleep(0.2)
            completed.append(args[0])
            return ProcessResult(invocation=invocation, stdout="")

    analyzer = JshintAnalyzer(SlowRunner(), workers=2, which=lambda name: name)

    async def _run() -> None:
        with pytest.raises(ProcessTimeoutError):
            await analyzer.analyze(_context(workspace, "a.js", "b.js", "c.js", "d.js"))
        await asyncio.sleep(0.3)

    asyncio.run(_run())

    assert completed == []


def test_typescript_requires_config_and_typescript_changes(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    analyzer = TypeScriptAnalyzer(scripted_runner, command=["npx", "tsc"], timeout=30)

    assert analyzer.is_feasible(_context(workspace, "a.ts")) is False
    (workspace / "tsconfig.json").write_text("{}", encoding="utf-8")
    assert analyzer.is_feasible(_context(workspace, "a.js", "b.vue")) is False
    assert analyzer.is_feasible(_context(workspace, "a.js", "view.tsx")) is True


def test_typescript_runs_type_check_only(workspace: Path, scripted_runner: ScriptedRunner) -> None:
    scripted_runner.when("npx", "tsc").exits(
        2, stdout="src/app.ts(5,12): error TS2322: Type mismatch\nFound 1 error.\n"
    )
    analyzer = TypeScriptAnalyzer(scripted_runner, command=["npx", "tsc"], timeout=30)

    findings = asyncio.run(analyzer.analyze(_context(workspace, "src/app.ts")))

    call = scripted_runner.calls[0]
    assert call.args == ("tsc", "--noEmit", "--pretty", "false")
    assert call.timeout == 30
    assert [f.message for f in findings] == ["TS2322: Type mismatch"]


def test_default_npx_commands_never_install_packages(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    (workspace / ".eslintrc.json").write_text("{}", encoding="utf-8")
    (workspace / "tsconfig.json").write_text("{}", encoding="utf-8")
    scripted_runner.when("npx", "eslint").returns("[]")
    scripted_runner.when("npx", "tsc").returns("")
    config = AnalyzerConfig()
    context = _context(workspace, "src/a.ts")

    asyncio.run(
        EslintAnalyzer(
            scripted_runner, command=config.eslint.command, timeout=config.eslint.timeout
        ).analyze(context)
    )
    asyncio.run(
        TypeScriptAnalyzer(
            scripted_runner, command=config.typescript.command, timeout=config.typescript.timeout
        ).analyze(context)
    )

    eslint_call, tsc_call = scripted_runner.calls
    assert eslint_call.command == tsc_call.command == "npx"
    assert eslint_call.args[:2] == ("--no-install", "eslint")
    assert tsc_call.args == ("--no-install", "tsc", "--noEmit", "--pretty", "false")


def test_missing_local_tsc_fails_instead_of_reporting_clean(
    workspace: Path, scripted_runner: ScriptedRunner
) -> None:
    scripted_runner.when("npx", "--no-install", "tsc").exits(
        1, stderr="npm ERR! npx canceled due to missing packages and no YES option"
    )
    analyzer = TypeScriptAnalyzer(
        scripted_runner, command=AnalyzerConfig().typescript.command, timeout=30
    )

    with pytest.raises(AnalyzerUnavailableError, match="without diagnostics"):
        asyncio.run(analyzer.analyze(_context(workspace, "src/app.ts")))
