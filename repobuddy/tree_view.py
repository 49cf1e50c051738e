"""Nested path mapping and box-drawing tree rendering."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "

Tree = Dict[str, Optional["Tree"]]


def build_tree(paths: Iterable[str]) -> Tree:
    """Map path segments to nested dicts (directories) or ``None`` (files)."""
    tree: Tree = {}
    for path in sorted(paths):
        parts = [part for part in path.replace("\\", "/").split("/") if part]
        current = tree
        for index, part in enumerate(parts):
            is_leaf = index == len(parts) - 1
            if part not in current:
                current[part] = None if is_leaf else {}
            child = current[part]
            if child is None:
                if is_leaf:
                    break
                # A path reused a file name as a directory; promote it.
                child = {}
                current[part] = child
            current = child
    return tree


def render_tree(tree: Tree, prefix: str = "") -> str:
    """Render ``tree`` depth-first; the last child of each level uses a distinct connector."""
    lines: List[str] = []
    _render(tree, prefix, lines)
    return "".join(f"{line}\n" for line in lines)


def _render(tree: Tree, prefix: str, lines: List[str]) -> None:
    entries = list(tree.items())
    for index, (name, value) in enumerate(entries):
        is_last = index == len(entries) - 1
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{name}")
        if isinstance(value, dict):
            _render(value, prefix + (SPACE_INDENT if is_last else PIPE_INDENT), lines)


def parse_tree_view(text: str) -> Tree:
    """Rebuild the nested mapping from output produced by ``render_tree``."""
    rows: List[Tuple[int, str]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        depth = 0
        while line.startswith(PIPE_INDENT, depth * 4) or line.startswith(SPACE_INDENT, depth * 4):
            depth += 1
        offset = depth * 4
        connector = line[offset : offset + 4]
        if connector not in (BRANCH, LAST_BRANCH):
            raise ValueError(f"Malformed tree line: {line!r}")
        rows.append((depth, line[offset + 4 :]))

    tree: Tree = {}
    stack: List[Tree] = [tree]
    for index, (depth, name) in enumerate(rows):
        if depth >= len(stack):
            raise ValueError(f"Tree line for {name!r} is indented past its parent")
        del stack[depth + 1 :]
        has_children = index + 1 < len(rows) and rows[index + 1][0] > depth
        if has_children:
            child: Tree = {}
            stack[depth][name] = child
            stack.append(child)
        else:
            stack[depth][name] = None
    return tree


__all__ = ["Tree", "build_tree", "parse_tree_view", "render_tree"]
