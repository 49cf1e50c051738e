"""Tests for the tree-sitter native grammar strategy."""

from __future__ import annotations

from pathlib import Path

import pytest

from repobuddy.analyzers.metadata import collect_metadata
from repobuddy.analyzers.tree_sitter import TreeSitterStrategy
from repobuddy.errors import ParseFailure
from repobuddy.models import Language

JS_SOURCE = """import { helper } from "./util";
export function main() {
  return helper(1);
}
class Widget {}
const add = (x) => x + 1;
"""


def test_javascript_top_level_statements(tmp_path: Path) -> None:
    strategy = TreeSitterStrategy(Language.JAVASCRIPT)
    body = strategy.parse(JS_SOURCE, tmp_path / "main.js")

    assert [node.kind for node in body] == [
        "import_statement",
        "export_statement",
        "class_declaration",
        "lexical_declaration",
    ]
    assert [node.name for node in body] == ["./util", "main", "Widget", "add"]
    assert body[0].span is not None
    assert body[1].line == 2
    assert body[1].span.end_line == 4


def test_native_body_feeds_metadata(tmp_path: Path) -> None:
    body = TreeSitterStrategy(Language.JAVASCRIPT).parse(JS_SOURCE, tmp_path / "main.js")
    metadata = collect_metadata(body, line_count=7, byte_size=len(JS_SOURCE))

    assert metadata.function_names == ["main", "add"]
    assert metadata.class_names == ["Widget"]
    assert metadata.import_names == ["./util"]


def test_syntax_errors_raise_parse_failure(tmp_path: Path) -> None:
    strategy = TreeSitterStrategy(Language.JAVASCRIPT)
    with pytest.raises(ParseFailure):
        strategy.parse("function (\n", tmp_path / "broken.js")


def test_typescript_interfaces_are_named(tmp_path: Path) -> None:
    strategy = TreeSitterStrategy(Language.TYPESCRIPT)
    body = strategy.parse("interface Props { label: string }\n", tmp_path / "types.ts")

    assert body[0].kind == "interface_declaration"
    assert body[0].name == "Props"


def test_tsx_files_use_the_jsx_aware_grammar(tmp_path: Path) -> None:
    strategy = TreeSitterStrategy(Language.TYPESCRIPT)
    source = "export const App = () => <div>hello</div>;\n"

    body = strategy.parse(source, tmp_path / "App.tsx")
    assert body[0].kind == "export_statement"
    assert body[0].name == "App"

    with pytest.raises(ParseFailure):
        strategy.parse(source, tmp_path / "App.ts")


def test_max_depth_limits_nesting(tmp_path: Path) -> None:
    shallow = TreeSitterStrategy(Language.JAVASCRIPT, max_depth=0)
    body = shallow.parse(JS_SOURCE, tmp_path / "main.js")
    assert all(node.children == [] for node in body)


def test_rejects_languages_without_a_grammar() -> None:
    with pytest.raises(ValueError):
        TreeSitterStrategy(Language.RUBY)
