"""Core data models shared across repobuddy components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

ANONYMOUS = "anonymous"


class Language(str, Enum):
    """Languages recognised by the analyzer, derived solely from file extension."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    JAVA = "java"
    GO = "go"
    RUST = "rust"
    CPP = "cpp"
    C = "c"
    CSHARP = "csharp"
    PHP = "php"
    RUBY = "ruby"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Span:
    """Grammar position of a natively parsed node (lines are 1-based)."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start_byte: Optional[int] = None
    end_byte: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": {"line": self.start_line, "column": self.start_column},
            "end": {"line": self.end_line, "column": self.end_column},
            "startByte": self.start_byte,
            "endByte": self.end_byte,
        }


@dataclass
class StructuralNode:
    """One extracted syntactic unit (function, class, import, export, ...).

    Fallback-parsed nodes carry ``content`` (the truncated source line);
    natively parsed nodes carry ``span`` and may nest ``children`` instead.
    """

    kind: str
    name: str
    line: int
    content: Optional[str] = None
    span: Optional[Span] = None
    children: List["StructuralNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind, "name": self.name, "line": self.line}
        if self.content is not None:
            payload["content"] = self.content
        if self.span is not None:
            payload["span"] = self.span.to_dict()
        if self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


@dataclass
class FileMetadata:
    """Raw size facts and deduplicated symbol names for one file."""

    line_count: int = 0
    byte_size: int = 0
    function_names: List[str] = field(default_factory=list)
    class_names: List[str] = field(default_factory=list)
    import_names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lineCount": self.line_count,
            "byteSize": self.byte_size,
            "functionNames": list(self.function_names),
            "classNames": list(self.class_names),
            "importNames": list(self.import_names),
        }


@dataclass(frozen=True)
class FileRecord:
    """Normalized analysis result for a single file."""

    path: str
    language: Language
    syntax_body: Optional[List[StructuralNode]]
    metadata: FileMetadata
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language.value,
            "syntaxBody": (
                [node.to_dict() for node in self.syntax_body]
                if self.syntax_body is not None
                else None
            ),
            "error": self.error,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class LanguageStats:
    """Per-language totals derived from an analysis set."""

    count: int = 0
    function_total: int = 0
    class_total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "count": self.count,
            "functionTotal": self.function_total,
            "classTotal": self.class_total,
        }


@dataclass
class Report:
    """Aggregated view of an analysis set consumed by renderers."""

    root: str
    records: List[FileRecord]
    language_stats: Dict[str, LanguageStats]
    key_files: List[FileRecord]
    tree: Dict[str, Any]
    tree_view: str
    insights: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "records": [record.to_dict() for record in self.records],
            "languageStats": {
                language: stats.to_dict() for language, stats in self.language_stats.items()
            },
            "keyFiles": [record.path for record in self.key_files],
            "treeView": self.tree_view,
            "insights": list(self.insights),
        }


__all__ = [
    "ANONYMOUS",
    "FileMetadata",
    "FileRecord",
    "Language",
    "LanguageStats",
    "Report",
    "Span",
    "StructuralNode",
]
