"""Configuration loading for localreview (.localreview.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".localreview.yml"
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".js", ".ts", ".tsx", ".vue")
ANALYZER_NAMES: Tuple[str, ...] = ("eslint", "jshint", "typescript")
ENV_REVIEWER_KEY = "LOCALREVIEW_REVIEWER"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolConfig:
    """Command line and time budget for one static analyzer."""

    command: List[str]
    timeout: float
    workers: int = 1


@dataclass
class AnalyzerConfig:
    """Analyzer enablement and per-tool settings."""

    enabled: List[str] = field(default_factory=lambda: list(ANALYZER_NAMES))
    # npx --no-install: a tool missing from node_modules fails instead of being fetched.
    eslint: ToolConfig = field(
        default_factory=lambda: ToolConfig(
            command=["npx", "--no-install", "eslint"], timeout=30.0
        )
    )
    jshint: ToolConfig = field(
        default_factory=lambda: ToolConfig(command=["jshint"], timeout=10.0)
    )
    typescript: ToolConfig = field(
        default_factory=lambda: ToolConfig(command=["npx", "--no-install", "tsc"], timeout=30.0)
    )

    def tool(self, name: str) -> ToolConfig:
        return getattr(self, name)


@dataclass
class ReviewerConfig:
    """External AI reviewer invocation settings."""

    executable: str = "gemini"
    args: List[str] = field(default_factory=list)
    timeout: float = 120.0


@dataclass
class ReviewConfig:
    """Represents the settings defined in .localreview.yml."""

    root: Path
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    reviewer: ReviewerConfig = field(default_factory=ReviewerConfig)
    analyzers: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    prompt_template: Optional[Path] = None


def load_config(config_path: Path) -> ReviewConfig:
    """Load configuration from disk, falling back to defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ReviewConfig(root=root)

    extensions = _as_str_list(data.get("extensions"))
    if extensions:
        config.extensions = tuple(_normalise_extension(ext) for ext in extensions)

    reviewer_data = _as_dict(data.get("reviewer"))
    if reviewer_data:
        config.reviewer = ReviewerConfig(
            executable=_as_str(reviewer_data.get("executable")) or ReviewerConfig.executable,
            args=_as_str_list(reviewer_data.get("args")),
            timeout=_as_timeout(
                reviewer_data.get("timeout"), ReviewerConfig.timeout, "reviewer.timeout"
            ),
        )
    env_reviewer = os.getenv(ENV_REVIEWER_KEY)
    if env_reviewer:
        config.reviewer.executable = env_reviewer

    analyzer_data = _as_dict(data.get("analyzers"))
    if analyzer_data:
        if "enabled" in analyzer_data:
            enabled = [name.lower() for name in _as_str_list(analyzer_data.get("enabled"))]
            unknown = sorted(set(enabled) - set(ANALYZER_NAMES))
            if unknown:
                raise ConfigError(f"Unknown analyzers requested: {', '.join(unknown)}")
            config.analyzers.enabled = enabled
        for name in ANALYZER_NAMES:
            tool_data = _as_dict(analyzer_data.get(name))
            if tool_data:
                _apply_tool_overrides(config.analyzers.tool(name), tool_data, name)

    prompt_data = _as_dict(data.get("prompt"))
    template = _as_str(prompt_data.get("template")) if prompt_data else None
    if template:
        config.prompt_template = (root / template).resolve()

    return config


def _apply_tool_overrides(tool: ToolConfig, data: Dict[str, Any], name: str) -> None:
    command = _as_str_list(data.get("command"))
    if command:
        tool.command = command
    tool.timeout = _as_timeout(data.get("timeout"), tool.timeout, f"analyzers.{name}.timeout")
    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError(f"analyzers.{name}.workers must be at least 1")
        tool.workers = workers


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _as_timeout(value: Any, default: float, key: str) -> float:
    if value is None:
        return default
    parsed = _as_float(value)
    if parsed is None or parsed <= 0:
        raise ConfigError(f"{key} must be a positive number of seconds")
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
