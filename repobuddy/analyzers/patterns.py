"""Pattern catalog and the line-based fallback extractor."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .base import ParserStrategy
from ..models import ANONYMOUS, Language, StructuralNode

_C_COMMENTS: Tuple[str, ...] = ("//", "/*", "*")
_HASH_COMMENTS: Tuple[str, ...] = ("#",)

_EXPORT_PREFIX = r"^(?:export\s+(?:default\s+)?)?"


@dataclass(frozen=True)
class PatternRule:
    """A regex whose first capture group names a node of ``kind``.

    Lines longer than ``max_line_length`` are not offered to the rule.
    """

    pattern: "re.Pattern[str]"
    kind: str
    max_line_length: Optional[int] = None

    def applies_to(self, line: str) -> bool:
        return self.max_line_length is None or len(line) <= self.max_line_length


@dataclass(frozen=True)
class LanguagePatterns:
    """Ordered rules plus the comment markers that make a line skippable."""

    comment_markers: Tuple[str, ...]
    rules: Tuple[PatternRule, ...]


def _rules(*entries: Tuple) -> Tuple[PatternRule, ...]:
    rules = []
    for pattern, kind, *limit in entries:
        rules.append(PatternRule(re.compile(pattern), kind, *limit))
    return tuple(rules)


_COMPONENT_RULES: Tuple[Tuple[str, str], ...] = (
    (_EXPORT_PREFIX + r"(?:const|let|var)\s+([A-Z][\w$]*)\s*=\s*\(", "FunctionComponent"),
    (_EXPORT_PREFIX + r"(?:async\s+)?function\s+([A-Z][\w$]*)", "FunctionComponent"),
    (_EXPORT_PREFIX + r"(?:async\s+)?function(?:\s*\*\s*|\s+)([a-z_$][\w$]*)", "FunctionDeclaration"),
    (_EXPORT_PREFIX + r"const\s+([a-z_$][\w$]*)\s*=\s*\(", "ArrowFunction"),
    (_EXPORT_PREFIX + r"const\s+([a-z_$][\w$]*)\s*=\s*async\s*\(", "AsyncArrowFunction"),
    (_EXPORT_PREFIX + r"(?:abstract\s+)?class\s+([\w$]+)", "ClassDeclaration"),
    (r"^import\s+.*?from\s+['\"]([^'\"]+)['\"]", "ImportDeclaration"),
    (r"^import\s+['\"]([^'\"]+)['\"]", "ImportDeclaration"),
    (r"^export\s+\{([^}]+)\}", "NamedExport"),
    (r"^export\s+(?:default\s+)?", "ExportDeclaration"),
    (r"\buse[A-Z][\w$]*\s*\(", "Hook"),
    (r"createSlice\s*\(", "ReduxSlice"),
    (r"configureStore\s*\(", "ReduxStore"),
)

_C_FUNCTION = (
    r"^(?:(?:static|inline|extern|const|unsigned|signed)\s+)*(?>[\w\*:<>]+)[\w\*:<>,&\s]*?[\s\*&]"
    r"(?!(?:if|for|while|switch|return|else|sizeof)\b)([A-Za-z_][\w:~]*)\s*\([^;]*$"
)
# Declarations longer than this are not considered for the function rule.
_C_FUNCTION_MAX_LINE = 512

PATTERN_CATALOG: Dict[Language, LanguagePatterns] = {
    Language.JAVASCRIPT: LanguagePatterns(_C_COMMENTS, _rules(*_COMPONENT_RULES)),
    Language.TYPESCRIPT: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            *_COMPONENT_RULES,
            (r"^(?:export\s+)?(?:declare\s+)?interface\s+([\w$]+)", "InterfaceDeclaration"),
            (r"^(?:export\s+)?(?:declare\s+)?type\s+([\w$]+)", "TypeAlias"),
        ),
    ),
    Language.PYTHON: LanguagePatterns(
        _HASH_COMMENTS,
        _rules(
            (r"^(?:async\s+)?def\s+(\w+)", "FunctionDef"),
            (r"^class\s+(\w+)", "ClassDef"),
            (r"^import\s+([\w.]+)", "Import"),
            (r"^from\s+([\w.]+)\s+import", "ImportFrom"),
        ),
    ),
    Language.JAVA: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (
                r"^(?:(?:public|protected|private|abstract|final|static)\s+)*class\s+([\w$]+)",
                "ClassDeclaration",
            ),
            (
                r"^(?:(?:public|protected|private|abstract|static)\s+)*interface\s+([\w$]+)",
                "InterfaceDeclaration",
            ),
            (
                r"^(?:public|private|protected)\s+(?:[\w$<>\[\],.?]+\s+)+([\w$]+)\s*\(",
                "MethodDeclaration",
            ),
            (r"^import\s+(?:static\s+)?([\w$.]+)", "ImportDeclaration"),
        ),
    ),
    Language.GO: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (r"^func\s+(\w+)", "FunctionDeclaration"),
            (r"^func\s+\([^)]*\)\s*(\w+)", "MethodDeclaration"),
            (r"^type\s+(\w+)\s+struct", "StructDeclaration"),
            (r"^type\s+(\w+)\s+interface", "InterfaceDeclaration"),
            (r"^import\s+(?:[\w.]+\s+)?\"([^\"]+)\"", "ImportDeclaration"),
            (r"^(?:[\w.]+\s+)?\"([\w./\-]+)\"$", "ImportDeclaration"),
        ),
    ),
    Language.RUST: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (
                r"^(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?fn\s+(\w+)",
                "FunctionDeclaration",
            ),
            (r"^(?:pub(?:\([^)]*\))?\s+)?struct\s+(\w+)", "StructDeclaration"),
            (r"^(?:pub(?:\([^)]*\))?\s+)?trait\s+(\w+)", "TraitDeclaration"),
            (r"^impl(?:<[^>]*>)?\s+(\w+)", "ImplDeclaration"),
            (r"^(?:pub(?:\([^)]*\))?\s+)?use\s+([\w:]+)", "UseDeclaration"),
        ),
    ),
    Language.C: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (r"^#\s*include\s*[<\"]([^>\"]+)[>\"]", "ImportDeclaration"),
            (r"^(?:typedef\s+)?struct\s+(\w+)", "StructDeclaration"),
            (_C_FUNCTION, "FunctionDeclaration", _C_FUNCTION_MAX_LINE),
        ),
    ),
    Language.CPP: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (r"^#\s*include\s*[<\"]([^>\"]+)[>\"]", "ImportDeclaration"),
            (r"^(?:template\s*<[^>]*>\s*)?class\s+(\w+)", "ClassDeclaration"),
            (r"^(?:typedef\s+)?struct\s+(\w+)", "StructDeclaration"),
            (_C_FUNCTION, "FunctionDeclaration", _C_FUNCTION_MAX_LINE),
        ),
    ),
    Language.CSHARP: LanguagePatterns(
        _C_COMMENTS,
        _rules(
            (r"^using\s+(?:static\s+)?([\w.]+)\s*;", "ImportDeclaration"),
            (
                r"^(?:(?:public|private|protected|internal|static|abstract|sealed|partial)\s+)*class\s+(\w+)",
                "ClassDeclaration",
            ),
            (
                r"^(?:(?:public|private|protected|internal|partial)\s+)*interface\s+(\w+)",
                "InterfaceDeclaration",
            ),
            (
                r"^(?:(?:public|private|protected|internal|static|virtual|override|async|abstract|sealed)\s+)+"
                r"[\w<>\[\],.?]+\s+(\w+)\s*\(",
                "MethodDeclaration",
            ),
        ),
    ),
    Language.PHP: LanguagePatterns(
        ("//", "/*", "*", "#"),
        _rules(
            (
                r"^(?:(?:public|private|protected|static|abstract|final)\s+)*function\s+(\w+)",
                "FunctionDeclaration",
            ),
            (r"^(?:(?:abstract|final)\s+)?class\s+(\w+)", "ClassDeclaration"),
            (r"^use\s+([\w\\]+)", "ImportDeclaration"),
            (
                r"^(?:require|include)(?:_once)?\s*\(?\s*['\"]([^'\"]+)['\"]",
                "ImportDeclaration",
            ),
        ),
    ),
    Language.RUBY: LanguagePatterns(
        _HASH_COMMENTS,
        _rules(
            (r"^def\s+(?:self\.)?([\w?!=]+)", "FunctionDeclaration"),
            (r"^class\s+([\w:]+)", "ClassDeclaration"),
            (r"^module\s+([\w:]+)", "ModuleDeclaration"),
            (r"^require(?:_relative)?\s*\(?\s*['\"]([^'\"]+)['\"]", "ImportDeclaration"),
        ),
    ),
}


def truncate_snippet(text: str, limit: int = 80) -> str:
    """Cap ``text`` at ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class PatternStrategy(ParserStrategy):
    """Extracts structure line by line using the language's pattern catalog."""

    name = "patterns"

    def __init__(self, language: Language, snippet_length: int = 80) -> None:
        self.language = language
        self.snippet_length = snippet_length
        self._patterns = PATTERN_CATALOG.get(language, LanguagePatterns(_C_COMMENTS, ()))

    def parse(self, source: str, path: Path) -> List[StructuralNode]:
        return self.extract(source)

    def extract(self, source: str) -> List[StructuralNode]:
        """Return deduplicated nodes in line order; first (kind, name) match wins."""
        return extract_structure(
            source,
            self._patterns.rules,
            self._patterns.comment_markers,
            snippet_length=self.snippet_length,
        )


def extract_structure(
    source: str,
    rules: Sequence[PatternRule],
    comment_markers: Sequence[str],
    *,
    snippet_length: int = 80,
) -> List[StructuralNode]:
    nodes: List[StructuralNode] = []
    seen: Set[Tuple[str, str]] = set()
    markers = tuple(comment_markers)

    for index, raw_line in enumerate(source.split("\n"), start=1):
        line = raw_line.strip()
        if not line or (markers and line.startswith(markers)):
            continue
        for rule in rules:
            if not rule.applies_to(line):
                continue
            match = rule.pattern.search(line)
            if match is None:
                continue
            name = _captured_name(match)
            key = (rule.kind, name)
            if key in seen:
                continue
            seen.add(key)
            nodes.append(
                StructuralNode(
                    kind=rule.kind,
                    name=name,
                    line=index,
                    content=truncate_snippet(line, snippet_length),
                )
            )
    return nodes


def _captured_name(match: "re.Match[str]") -> str:
    if not match.re.groups:
        return ANONYMOUS
    captured = match.group(1)
    if captured is None:
        return ANONYMOUS
    captured = captured.strip()
    return captured or ANONYMOUS


__all__ = [
    "LanguagePatterns",
    "PATTERN_CATALOG",
    "PatternRule",
    "PatternStrategy",
    "extract_structure",
    "truncate_snippet",
]
