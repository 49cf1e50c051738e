"""Python grammar strategy backed by an external interpreter process."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .base import ParserStrategy
from ..errors import ParseFailure
from ..models import ANONYMOUS, Span, StructuralNode

# Executed by the child interpreter: reads source on stdin, prints the
# top-level statements (and nested bodies up to argv[1] levels) as JSON.
_AST_SCRIPT = """
import ast
import json
import sys


def convert(node, depth):
    entry = {
        "type": type(node).__name__,
        "lineno": getattr(node, "lineno", 0),
        "col_offset": getattr(node, "col_offset", 0),
        "end_lineno": getattr(node, "end_lineno", None),
        "end_col_offset": getattr(node, "end_col_offset", None),
    }
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
        entry["name"] = node.name
    elif isinstance(node, ast.Import):
        entry["names"] = [alias.name for alias in node.names]
    elif isinstance(node, ast.ImportFrom):
        entry["names"] = ["." * node.level + (node.module or "")]
    body = getattr(node, "body", None)
    if depth > 0 and isinstance(body, list):
        entry["children"] = [convert(child, depth - 1) for child in body]
    return entry


depth = int(sys.argv[1]) if len(sys.argv) > 1 else 1
source = sys.stdin.buffer.read().decode("utf-8", errors="replace")
try:
    tree = ast.parse(source)
except (SyntaxError, ValueError) as exc:
    print(json.dumps({"error": str(exc)}))
else:
    print(json.dumps({"body": [convert(node, depth) for node in tree.body]}))
"""

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class PythonInterpreterStrategy(ParserStrategy):
    """Builds a real Python syntax tree by invoking an interpreter subprocess."""

    name = "python_interpreter"

    def __init__(
        self,
        executable: Optional[str] = None,
        *,
        timeout: float = 10.0,
        max_depth: int = 1,
        runner: Optional[Runner] = None,
    ) -> None:
        self.executable = executable or sys.executable
        self.timeout = timeout
        self.max_depth = max(0, max_depth)
        self._runner = runner or subprocess.run

    def parse(self, source: str, path: Path) -> List[StructuralNode]:
        args: Sequence[str] = [self.executable, "-c", _AST_SCRIPT, str(self.max_depth)]
        try:
            completed = self._runner(
                list(args),
                input=source,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ParseFailure(f"python interpreter timed out after {self.timeout}s on {path.name}") from exc
        except OSError as exc:
            raise ParseFailure(f"python interpreter unavailable: {exc}") from exc

        if completed.returncode != 0:
            detail = (completed.stderr or "").strip().splitlines()
            raise ParseFailure(
                f"python interpreter exited with {completed.returncode}: {detail[-1] if detail else 'no output'}"
            )

        try:
            payload = json.loads(completed.stdout)
        except (TypeError, ValueError) as exc:
            raise ParseFailure(f"python interpreter returned invalid JSON for {path.name}") from exc

        if not isinstance(payload, dict):
            raise ParseFailure(f"python interpreter returned an unexpected payload for {path.name}")
        if "error" in payload:
            raise ParseFailure(str(payload["error"]))

        body = payload.get("body")
        if not isinstance(body, list):
            raise ParseFailure(f"python interpreter returned no body for {path.name}")

        nodes: List[StructuralNode] = []
        for entry in body:
            if isinstance(entry, dict):
                nodes.extend(_to_nodes(entry))
        return nodes


def _to_nodes(entry: Dict[str, Any]) -> List[StructuralNode]:
    kind = str(entry.get("type", ANONYMOUS))
    line = int(entry.get("lineno") or 0)
    span = Span(
        start_line=line,
        start_column=int(entry.get("col_offset") or 0),
        end_line=int(entry.get("end_lineno") or line),
        end_column=int(entry.get("end_col_offset") or 0),
    )
    children: List[StructuralNode] = []
    for child in entry.get("children") or []:
        if isinstance(child, dict):
            children.extend(_to_nodes(child))

    names = entry.get("names")
    if isinstance(names, list) and names:
        # One node per imported module so ``import a, b`` reports both.
        return [
            StructuralNode(kind=kind, name=str(name) or ANONYMOUS, line=line, span=span)
            for name in names
        ]

    name = entry.get("name")
    return [
        StructuralNode(
            kind=kind,
            name=str(name) if name else ANONYMOUS,
            line=line,
            span=span,
            children=children,
        )
    ]


__all__ = ["PythonInterpreterStrategy"]
