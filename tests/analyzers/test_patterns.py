"""Tests for the pattern catalog fallback extractor."""

from __future__ import annotations

import re
import time
from pathlib import Path

from repobuddy.analyzers.patterns import PATTERN_CATALOG, PatternRule, PatternStrategy, truncate_snippet
from repobuddy.models import ANONYMOUS, Language


def _kinds_and_names(language: Language, source: str) -> list[tuple[str, str]]:
    nodes = PatternStrategy(language).extract(source)
    return [(node.kind, node.name) for node in nodes]


def test_catalog_covers_every_known_language() -> None:
    assert set(PATTERN_CATALOG) == {lang for lang in Language if lang is not Language.UNKNOWN}


def test_javascript_component_function_and_import() -> None:
    source = (
        "import React from 'react';\n"
        "// function commented() {}\n"
        "export const App = () => {\n"
        "  const [count, setCount] = useState(0);\n"
        "};\n"
        "function helper() {}\n"
    )
    pairs = _kinds_and_names(Language.JAVASCRIPT, source)

    assert ("ImportDeclaration", "react") in pairs
    assert ("FunctionComponent", "App") in pairs
    assert ("ExportDeclaration", ANONYMOUS) in pairs
    assert ("Hook", ANONYMOUS) in pairs
    assert ("FunctionDeclaration", "helper") in pairs
    assert all(name != "commented" for _, name in pairs)


def test_duplicate_kind_and_name_keeps_first_line() -> None:
    source = "function a() {}\nfunction a() {}\n"
    nodes = PatternStrategy(Language.JAVASCRIPT).extract(source)

    matches = [node for node in nodes if node.name == "a"]
    assert len(matches) == 1
    assert matches[0].line == 1


def test_line_numbers_are_one_based_and_snippets_truncated() -> None:
    long_line = "function " + "x" * 100 + "() {}"
    nodes = PatternStrategy(Language.JAVASCRIPT).extract("\n" + long_line)

    assert nodes[0].line == 2
    assert nodes[0].content == long_line[:80] + "..."


def test_truncate_snippet_leaves_short_text_alone() -> None:
    assert truncate_snippet("short") == "short"
    assert truncate_snippet("x" * 81) == "x" * 80 + "..."
    assert truncate_snippet("x" * 80) == "x" * 80


def test_function_keyword_inside_identifier_is_ignored() -> None:
    assert _kinds_and_names(Language.JAVASCRIPT, "const functionality = 1;\n") == []


def test_typescript_adds_interfaces_and_type_aliases() -> None:
    source = "export interface Props {}\ntype Id = string;\nexport class Store {}\n"
    pairs = _kinds_and_names(Language.TYPESCRIPT, source)

    assert ("InterfaceDeclaration", "Props") in pairs
    assert ("TypeAlias", "Id") in pairs
    assert ("ClassDeclaration", "Store") in pairs


def test_python_patterns_skip_hash_comments() -> None:
    source = "# def hidden():\nimport os\nfrom pathlib import Path\nclass A:\n    async def run(self):\n        pass\n"
    pairs = _kinds_and_names(Language.PYTHON, source)

    assert pairs == [
        ("Import", "os"),
        ("ImportFrom", "pathlib"),
        ("ClassDef", "A"),
        ("FunctionDef", "run"),
    ]


def test_go_patterns_handle_methods_structs_and_import_blocks() -> None:
    source = (
        "package main\n"
        "import (\n"
        '    "fmt"\n'
        '    str "strings"\n'
        ")\n"
        "type Server struct {}\n"
        "func (s *Server) Start() {}\n"
        "func main() {}\n"
    )
    pairs = _kinds_and_names(Language.GO, source)

    assert ("ImportDeclaration", "fmt") in pairs
    assert ("ImportDeclaration", "strings") in pairs
    assert ("StructDeclaration", "Server") in pairs
    assert ("MethodDeclaration", "Start") in pairs
    assert ("FunctionDeclaration", "main") in pairs


def test_rust_patterns() -> None:
    source = "use std::io;\npub struct Point {}\npub trait Shape {}\npub async fn run() {}\n"
    pairs = _kinds_and_names(Language.RUST, source)

    assert pairs == [
        ("UseDeclaration", "std::io"),
        ("StructDeclaration", "Point"),
        ("TraitDeclaration", "Shape"),
        ("FunctionDeclaration", "run"),
    ]


def test_c_patterns_ignore_control_flow() -> None:
    source = "#include <stdio.h>\nstatic int add(int a, int b) {\n    if (a) {\n    return a + b;\n}\n"
    pairs = _kinds_and_names(Language.C, source)

    assert ("ImportDeclaration", "stdio.h") in pairs
    assert ("FunctionDeclaration", "add") in pairs
    assert all(name != "if" for _, name in pairs)


def test_java_csharp_php_ruby_patterns() -> None:
    java = _kinds_and_names(
        Language.JAVA, "import java.util.List;\npublic class Main {\npublic static void run(String a) {\n"
    )
    assert ("ImportDeclaration", "java.util.List") in java
    assert ("ClassDeclaration", "Main") in java
    assert ("MethodDeclaration", "run") in java

    csharp = _kinds_and_names(Language.CSHARP, "using System.Text;\npublic sealed class Worker {\n")
    assert csharp == [("ImportDeclaration", "System.Text"), ("ClassDeclaration", "Worker")]

    php = _kinds_and_names(Language.PHP, "<?php\nrequire_once 'boot.php';\nfinal class Kernel {\npublic function handle() {\n")
    assert ("ImportDeclaration", "boot.php") in php
    assert ("ClassDeclaration", "Kernel") in php
    assert ("FunctionDeclaration", "handle") in php

    ruby = _kinds_and_names(Language.RUBY, "require 'json'\nmodule Tools\nclass Runner\ndef self.call\n")
    assert ruby == [
        ("ImportDeclaration", "json"),
        ("ModuleDeclaration", "Tools"),
        ("ClassDeclaration", "Runner"),
        ("FunctionDeclaration", "call"),
    ]


def test_parse_ignores_path(tmp_path: Path) -> None:
    strategy = PatternStrategy(Language.PYTHON)
    assert strategy.parse("def f():\n", tmp_path / "x.py") == strategy.extract("def f():\n")


def test_hooks_collapse_to_one_anonymous_node_per_file() -> None:
    source = "const [a, setA] = useState(0);\nuseEffect(() => {}, []);\nconst ctx = useContext(Theme);\n"
    nodes = PatternStrategy(Language.JAVASCRIPT).extract(source)

    hooks = [node for node in nodes if node.kind == "Hook"]
    assert len(hooks) == 1
    assert hooks[0].name == ANONYMOUS
    assert hooks[0].line == 1


def test_extraction_is_idempotent() -> None:
    source = (
        "import React from 'react';\n"
        "export default function App() {\n"
        "  const [v] = useState(1);\n"
        "}\n"
        "const helper = () => 1;\n"
        "class Store {}\n"
    )
    strategy = PatternStrategy(Language.JAVASCRIPT)

    first = strategy.extract(source)
    second = strategy.extract(source)

    assert first == second
    assert PatternStrategy(Language.JAVASCRIPT).extract(source) == first


def test_c_function_rule_handles_pointer_and_qualified_names() -> None:
    source = "char *dup(const char *s) {\nstd::string Parser::next(int n) {\n"
    pairs = _kinds_and_names(Language.CPP, source)

    assert ("FunctionDeclaration", "dup") in pairs
    assert ("FunctionDeclaration", "Parser::next") in pairs


def test_c_function_rule_skips_overlong_lines_quickly() -> None:
    long_token = "a" * 20000 + "("
    started = time.monotonic()
    pairs = _kinds_and_names(Language.C, long_token + "\nint main(void) {\n")
    elapsed = time.monotonic() - started

    assert pairs == [("FunctionDeclaration", "main")]
    assert elapsed < 2.0


def test_c_function_pattern_is_linear_on_a_single_long_token() -> None:
    rule = next(r for r in PATTERN_CATALOG[Language.C].rules if r.kind == "FunctionDeclaration")
    started = time.monotonic()
    assert rule.pattern.search("x" * 20000 + "(") is None
    assert time.monotonic() - started < 2.0


def test_rule_line_limit() -> None:
    rule = PatternRule(re.compile(r"(\w+)"), "Word", max_line_length=3)

    assert rule.applies_to("abc")
    assert not rule.applies_to("abcd")
    assert PatternRule(re.compile(r"x"), "X").applies_to("x" * 10000)
