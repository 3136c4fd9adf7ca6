"""Static analyzer strategies and the selector that picks one of them."""

from __future__ import annotations

from .base import AnalysisContext, AnalyzerStrategy, CommandAnalyzer
from .eslint import EslintAnalyzer
from .jshint import JshintAnalyzer
from .parsers import parse_eslint_json, parse_jshint_output, parse_tsc_output
from .selector import AnalysisReport, AnalyzerSelector, build_default_selector
from .typescript import TypeScriptAnalyzer

__all__ = [
    "AnalysisContext",
    "AnalysisReport",
    "AnalyzerSelector",
    "AnalyzerStrategy",
    "CommandAnalyzer",
    "EslintAnalyzer",
    "JshintAnalyzer",
    "TypeScriptAnalyzer",
    "build_default_selector",
    "parse_eslint_json",
    "parse_jshint_output",
    "parse_tsc_output",
]
