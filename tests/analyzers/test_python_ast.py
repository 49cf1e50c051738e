"""Tests for the interpreter-backed Python strategy."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

from repobuddy.analyzers.python_ast import PythonInterpreterStrategy
from repobuddy.errors import ParseFailure


class _StubRunner:
    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list[dict[str, Any]] = []

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append({"args": args, **kwargs})
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


def _payload(body: list[dict[str, Any]]) -> str:
    return json.dumps({"body": body})


def test_source_is_sent_on_stdin_with_timeout(tmp_path: Path) -> None:
    runner = _StubRunner(stdout=_payload([]))
    strategy = PythonInterpreterStrategy("python-x", timeout=2.5, runner=runner)

    assert strategy.parse("x = 1\n", tmp_path / "a.py") == []
    call = runner.calls[0]
    assert call["args"][0] == "python-x"
    assert call["input"] == "x = 1\n"
    assert call["timeout"] == 2.5


def test_payload_becomes_structural_nodes(tmp_path: Path) -> None:
    runner = _StubRunner(
        stdout=_payload(
            [
                {"type": "Import", "lineno": 1, "col_offset": 0, "names": ["os", "sys"]},
                {
                    "type": "ClassDef",
                    "lineno": 3,
                    "col_offset": 0,
                    "end_lineno": 5,
                    "name": "Service",
                    "children": [{"type": "FunctionDef", "lineno": 4, "name": "run"}],
                },
            ]
        )
    )
    body = PythonInterpreterStrategy(runner=runner).parse("", tmp_path / "svc.py")

    assert [(node.kind, node.name) for node in body] == [
        ("Import", "os"),
        ("Import", "sys"),
        ("ClassDef", "Service"),
    ]
    assert body[2].span is not None and body[2].span.end_line == 5
    assert [child.name for child in body[2].children] == ["run"]


@pytest.mark.parametrize(
    "runner",
    [
        _StubRunner(stdout=json.dumps({"error": "invalid syntax (line 1)"})),
        _StubRunner(stdout="not json"),
        _StubRunner(stdout="", returncode=1, stderr="boom"),
        _StubRunner(stdout=json.dumps({"nobody": []})),
    ],
)
def test_interpreter_problems_raise_parse_failure(tmp_path: Path, runner: _StubRunner) -> None:
    with pytest.raises(ParseFailure):
        PythonInterpreterStrategy(runner=runner).parse("def (", tmp_path / "bad.py")


def test_timeouts_raise_parse_failure(tmp_path: Path) -> None:
    def _slow(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])

    with pytest.raises(ParseFailure, match="timed out"):
        PythonInterpreterStrategy(timeout=0.1, runner=_slow).parse("", tmp_path / "a.py")


def test_missing_interpreter_raises_parse_failure(tmp_path: Path) -> None:
    strategy = PythonInterpreterStrategy(str(tmp_path / "no-such-python"))
    with pytest.raises(ParseFailure):
        strategy.parse("x = 1\n", tmp_path / "a.py")


def test_real_interpreter_round_trip(tmp_path: Path) -> None:
    source = "import json\nfrom . import sibling\n\nasync def fetch():\n    pass\n\nclass Box:\n    pass\n"
    body = PythonInterpreterStrategy(sys.executable).parse(source, tmp_path / "mod.py")

    assert [(node.kind, node.name) for node in body] == [
        ("Import", "json"),
        ("ImportFrom", "."),
        ("AsyncFunctionDef", "fetch"),
        ("ClassDef", "Box"),
    ]
    assert body[2].line == 4


def test_real_interpreter_rejects_bad_syntax(tmp_path: Path) -> None:
    with pytest.raises(ParseFailure):
        PythonInterpreterStrategy(sys.executable).parse("def broken(:\n", tmp_path / "bad.py")
