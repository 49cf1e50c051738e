"""Tree-sitter powered native grammar strategy for JavaScript and TypeScript."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language as Grammar
from tree_sitter import Node, Parser

from .base import ParserStrategy
from ..errors import ParseFailure
from ..models import ANONYMOUS, Language, Span, StructuralNode

CIRCULAR_MARKER = "[Circular]"

_GRAMMARS: Dict[str, Grammar] = {
    "javascript": Grammar(tree_sitter_javascript.language()),
    "typescript": Grammar(tree_sitter_typescript.language_typescript()),
    "tsx": Grammar(tree_sitter_typescript.language_tsx()),
}

# Node types that never carry structure worth reporting.
_SKIPPED_TYPES: FrozenSet[str] = frozenset({"comment", "hash_bang_line"})

_DECLARATION_LIST_TYPES: FrozenSet[str] = frozenset({"lexical_declaration", "variable_declaration"})


class TreeSitterStrategy(ParserStrategy):
    """Parses JS/TS sources with tree-sitter and keeps the top-level statements."""

    name = "tree_sitter"
    LANGUAGES: FrozenSet[Language] = frozenset({Language.JAVASCRIPT, Language.TYPESCRIPT})

    def __init__(self, language: Language, max_depth: int = 3) -> None:
        if language not in self.LANGUAGES:
            raise ValueError(f"tree-sitter strategy does not handle {language.value}")
        self.language = language
        self.max_depth = max(0, max_depth)

    def parse(self, source: str, path: Path) -> List[StructuralNode]:
        grammar_key = self._grammar_for(path)
        source_bytes = source.encode("utf-8")
        # Parser instances are not shared so analyses can run on worker threads.
        parser = Parser(_GRAMMARS[grammar_key])
        try:
            tree = parser.parse(source_bytes)
        except (ValueError, RuntimeError) as exc:
            raise ParseFailure(f"tree-sitter could not parse {path.name}: {exc}") from exc

        root = tree.root_node
        if root.has_error:
            raise ParseFailure(f"{path.name} contains syntax the {grammar_key} grammar rejects")

        visited: Set[int] = set()
        return [
            self._convert(child, source_bytes, 0, visited)
            for child in root.named_children
            if self._keep(child)
        ]

    def _grammar_for(self, path: Path) -> str:
        if self.language is Language.JAVASCRIPT:
            return "javascript"
        if path.suffix.lower() == ".tsx":
            return "tsx"
        return "typescript"

    @staticmethod
    def _keep(node: Node) -> bool:
        return not node.type.startswith("_") and node.type not in _SKIPPED_TYPES

    def _convert(self, node: Node, source_bytes: bytes, depth: int, visited: Set[int]) -> StructuralNode:
        line = node.start_point[0] + 1
        if node.id in visited:
            return StructuralNode(kind=CIRCULAR_MARKER, name=CIRCULAR_MARKER, line=line)
        visited.add(node.id)

        children: List[StructuralNode] = []
        if depth < self.max_depth:
            children = [
                self._convert(child, source_bytes, depth + 1, visited)
                for child in node.named_children
                if self._keep(child)
            ]

        return StructuralNode(
            kind=node.type,
            name=_node_name(node, source_bytes),
            line=line,
            span=Span(
                start_line=line,
                start_column=node.start_point[1],
                end_line=node.end_point[0] + 1,
                end_column=node.end_point[1],
                start_byte=node.start_byte,
                end_byte=node.end_byte,
            ),
            children=children,
        )


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _node_name(node: Node, source_bytes: bytes) -> str:
    name = _raw_name(node, source_bytes)
    return name.strip() if name and name.strip() else ANONYMOUS


def _raw_name(node: Node, source_bytes: bytes) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return _node_text(name_node, source_bytes)

    if node.type == "import_statement":
        source = node.child_by_field_name("source")
        if source is not None:
            return _node_text(source, source_bytes).strip("'\"`")
        return None

    if node.type == "export_statement":
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            return _raw_name(declaration, source_bytes)
        value = node.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            return _node_text(value, source_bytes)
        return None

    if node.type in _DECLARATION_LIST_TYPES:
        for child in node.named_children:
            if child.type == "variable_declarator":
                return _raw_name(child, source_bytes)
    return None


__all__ = ["CIRCULAR_MARKER", "TreeSitterStrategy"]
