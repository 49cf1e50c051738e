"""Parser strategy implementations and the per-language dispatch table."""

from __future__ import annotations

from typing import Callable, Dict, List

from ..config import AnalysisConfig
from ..models import Language
from .base import ParserStrategy
from .patterns import PatternStrategy
from .python_ast import PythonInterpreterStrategy
from .tree_sitter import TreeSitterStrategy

StrategyTable = Dict[Language, List[ParserStrategy]]


def _tree_sitter(language: Language) -> Callable[[AnalysisConfig], ParserStrategy]:
    def _factory(settings: AnalysisConfig) -> ParserStrategy:
        return TreeSitterStrategy(language, max_depth=settings.native_depth)

    return _factory


def _python_interpreter(settings: AnalysisConfig) -> ParserStrategy:
    return PythonInterpreterStrategy(
        settings.python_executable,
        timeout=settings.parse_timeout,
        max_depth=1,
    )


_NATIVE_FACTORIES: Dict[Language, Callable[[AnalysisConfig], ParserStrategy]] = {
    Language.JAVASCRIPT: _tree_sitter(Language.JAVASCRIPT),
    Language.TYPESCRIPT: _tree_sitter(Language.TYPESCRIPT),
}

_INTERPRETER_FACTORIES: Dict[Language, Callable[[AnalysisConfig], ParserStrategy]] = {
    Language.PYTHON: _python_interpreter,
}


def build_strategies(settings: AnalysisConfig | None = None) -> StrategyTable:
    """Return the ordered strategies per language; the pattern catalog is always last."""
    settings = settings or AnalysisConfig()
    table: StrategyTable = {}
    for language in Language:
        if language is Language.UNKNOWN:
            continue
        strategies: List[ParserStrategy] = []
        if settings.native_parsers and language in _NATIVE_FACTORIES:
            strategies.append(_NATIVE_FACTORIES[language](settings))
        if settings.python_interpreter and language in _INTERPRETER_FACTORIES:
            strategies.append(_INTERPRETER_FACTORIES[language](settings))
        strategies.append(PatternStrategy(language, snippet_length=settings.snippet_length))
        table[language] = strategies
    return table


__all__ = [
    "ParserStrategy",
    "PatternStrategy",
    "PythonInterpreterStrategy",
    "StrategyTable",
    "TreeSitterStrategy",
    "build_strategies",
]
