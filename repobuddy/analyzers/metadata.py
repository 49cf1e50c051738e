"""Symbol-family tables and metadata collection from structural nodes."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Sequence

from ..models import ANONYMOUS, FileMetadata, StructuralNode

FUNCTION_KINDS: FrozenSet[str] = frozenset(
    {
        "FunctionDeclaration",
        "FunctionDef",
        "ArrowFunction",
        "AsyncArrowFunction",
        "FunctionComponent",
        # tree-sitter grammar types
        "function_declaration",
        "generator_function_declaration",
    }
)

CLASS_KINDS: FrozenSet[str] = frozenset(
    {
        "ClassDeclaration",
        "ClassDef",
        "class_declaration",
        "abstract_class_declaration",
    }
)

IMPORT_KINDS: FrozenSet[str] = frozenset(
    {
        "ImportDeclaration",
        "Import",
        "ImportFrom",
        "import_statement",
    }
)

# Opt-in kinds (``analysis.extended_symbol_kinds``) for methods, structs and ``use`` items.
EXTENDED_FUNCTION_KINDS: FrozenSet[str] = FUNCTION_KINDS | {"AsyncFunctionDef", "MethodDeclaration"}
EXTENDED_CLASS_KINDS: FrozenSet[str] = CLASS_KINDS | {"StructDeclaration"}
EXTENDED_IMPORT_KINDS: FrozenSet[str] = IMPORT_KINDS | {"UseDeclaration"}

# Wrappers whose child declaration counts as top-level (``export function x``).
_EXPORT_KINDS: FrozenSet[str] = frozenset({"export_statement"})
_DECLARATION_LIST_KINDS: FrozenSet[str] = frozenset({"lexical_declaration", "variable_declaration"})
_FUNCTION_VALUE_KINDS: FrozenSet[str] = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)


class _NameSet:
    """Insertion-ordered, deduplicated name collection."""

    def __init__(self) -> None:
        self._names: List[str] = []
        self._seen: set[str] = set()

    def add(self, name: Optional[str]) -> None:
        if not name or name == ANONYMOUS or name in self._seen:
            return
        self._seen.add(name)
        self._names.append(name)

    def to_list(self) -> List[str]:
        return list(self._names)


def collect_metadata(
    body: Optional[Sequence[StructuralNode]],
    *,
    line_count: int,
    byte_size: int,
    extended: bool = False,
) -> FileMetadata:
    """Populate function/class/import names from the top-level nodes of ``body``."""
    function_kinds = EXTENDED_FUNCTION_KINDS if extended else FUNCTION_KINDS
    class_kinds = EXTENDED_CLASS_KINDS if extended else CLASS_KINDS
    import_kinds = EXTENDED_IMPORT_KINDS if extended else IMPORT_KINDS
    functions = _NameSet()
    classes = _NameSet()
    imports = _NameSet()

    for node in _top_level(body or ()):
        if node.kind in function_kinds:
            functions.add(node.name)
        elif node.kind in class_kinds:
            classes.add(node.name)
        elif node.kind in import_kinds:
            imports.add(node.name)
        elif node.kind in _DECLARATION_LIST_KINDS:
            for declarator in node.children:
                if any(child.kind in _FUNCTION_VALUE_KINDS for child in declarator.children):
                    functions.add(declarator.name)

    return FileMetadata(
        line_count=line_count,
        byte_size=byte_size,
        function_names=functions.to_list(),
        class_names=classes.to_list(),
        import_names=imports.to_list(),
    )


def _top_level(body: Iterable[StructuralNode]) -> Iterable[StructuralNode]:
    for node in body:
        if node.kind in _EXPORT_KINDS:
            yield from node.children
        else:
            yield node


__all__ = [
    "CLASS_KINDS",
    "EXTENDED_CLASS_KINDS",
    "EXTENDED_FUNCTION_KINDS",
    "EXTENDED_IMPORT_KINDS",
    "FUNCTION_KINDS",
    "IMPORT_KINDS",
    "collect_metadata",
]
