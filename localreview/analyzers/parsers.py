"""Pure parsers turning analyzer output into normalised findings.

Each parser accepts the raw text a tool printed and returns findings in output
order. Lines that do not match the tool's format are skipped.
"""

from __future__ import annotations

import json
import re
from pathlib import Path, PurePath
from typing import Any, Iterable, List, Optional

from ..models import Finding, FindingSource, Severity

_JSHINT_LINE = re.compile(
    r"^(?P<file>.+?): line (?P<line>\d+), col (?P<col>\d+), (?P<message>.+)$"
)
_TSC_LINE = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<col>\d+)\): (?P<severity>error|warning) (?P<message>.+)$"
)

_ESLINT_SEVERITIES = {2: Severity.ERROR, 1: Severity.WARNING}


def parse_jshint_output(text: str) -> List[Finding]:
    """Parse JSHint's default reporter (``file: line N, col N, message``)."""
    findings: List[Finding] = []
    for raw in text.splitlines():
        match = _JSHINT_LINE.match(raw.strip())
        if not match:
            continue
        finding = _make_finding(
            match.group("file"),
            match.group("line"),
            match.group("col"),
            match.group("message"),
            Severity.WARNING,
            FindingSource.JSHINT,
        )
        if finding is not None:
            findings.append(finding)
    return findings


def parse_tsc_output(text: str) -> List[Finding]:
    """Parse ``tsc --pretty false`` diagnostics (``file(line,col): error TS1234: message``)."""
    findings: List[Finding] = []
    for raw in text.splitlines():
        match = _TSC_LINE.match(raw.strip())
        if not match:
            continue
        finding = _make_finding(
            match.group("file"),
            match.group("line"),
            match.group("col"),
            match.group("message"),
            Severity(match.group("severity")),
            FindingSource.TYPESCRIPT,
        )
        if finding is not None:
            findings.append(finding)
    return findings


def parse_eslint_json(text: str, root: Path | None = None) -> List[Finding]:
    """Parse ``eslint --format json`` output.

    Raises ``ValueError`` when the document is not the JSON array ESLint emits;
    individual malformed entries are skipped.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"ESLint produced invalid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError("ESLint JSON output must be a list of file results")

    findings: List[Finding] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        file_path = entry.get("filePath")
        if not isinstance(file_path, str) or not file_path:
            continue
        relative = relativize(file_path, root)
        for message in _as_list(entry.get("messages")):
            if not isinstance(message, dict):
                continue
            text_value = message.get("message")
            if not isinstance(text_value, str) or not text_value.strip():
                continue
            rule_id = message.get("ruleId")
            if isinstance(rule_id, str) and rule_id:
                text_value = f"{text_value.strip()} ({rule_id})"
            severity = Severity.ERROR if message.get("fatal") else _ESLINT_SEVERITIES.get(
                message.get("severity"), Severity.INFO
            )
            finding = _make_finding(
                relative,
                message.get("line"),
                message.get("column"),
                text_value,
                severity,
                FindingSource.ESLINT,
            )
            if finding is not None:
                findings.append(finding)
    return findings


def relativize(file_path: str, root: Path | None) -> str:
    """Return ``file_path`` relative to ``root`` (POSIX separators) when it lies inside it."""
    if root is None:
        return file_path
    path = PurePath(file_path)
    if not path.is_absolute():
        return path.as_posix()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        try:
            return path.relative_to(root.resolve()).as_posix()
        except ValueError:
            return file_path


def _make_finding(
    file_path: Any,
    line: Any,
    column: Any,
    message: Any,
    severity: Severity,
    source: FindingSource,
) -> Optional[Finding]:
    file_text = str(file_path).strip() if file_path is not None else ""
    message_text = str(message).strip() if message is not None else ""
    if not file_text or not message_text:
        return None
    return Finding(
        file_path=file_text,
        line=_as_position(line),
        column=_as_position(column),
        message=message_text,
        severity=severity,
        source=source,
    )


def _as_position(value: Any) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return 0
    return parsed if parsed > 0 else 0


def _as_list(value: Any) -> Iterable[Any]:
    return value if isinstance(value, list) else []


__all__ = [
    "parse_eslint_json",
    "parse_jshint_output",
    "parse_tsc_output",
    "relativize",
]
