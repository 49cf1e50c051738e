"""End-to-end walk and aggregation over a small TypeScript project."""

from __future__ import annotations

import repobuddy
from repobuddy.tree_view import parse_tree_view
from tests._fixtures.repo_builder import RepoBuilder


def _typescript_project(repo_builder: RepoBuilder) -> None:
    index_lines = ['import { helper } from "./util";', "", "export function main() {"]
    index_lines += [f"  const value{n} = helper({n});" for n in range(75)]
    index_lines += ["}", ""]
    assert len(index_lines) == 80
    util_lines = ["function helper(value: number): number {", "  return value * 2;", "}"]
    util_lines += ["" for _ in range(7)]

    repo_builder.write(
        {
            "index.ts": "\n".join(index_lines[:-1]) + "\n",
            "util.ts": "\n".join(util_lines),
            "node_modules/lib.js": "function vendored() {}\n",
        }
    )


def test_walk_and_aggregate_typescript_project(repo_builder: RepoBuilder) -> None:
    _typescript_project(repo_builder)

    records = repobuddy.walk(repo_builder.path())
    assert [record.path for record in records] == ["index.ts", "util.ts"]
    assert records[0].metadata.line_count == 80
    assert records[0].metadata.function_names == ["main"]
    assert records[0].metadata.import_names == ["./util"]
    assert records[1].metadata.line_count == 10
    assert records[1].metadata.function_names == ["helper"]

    report = repobuddy.aggregate(records, root=str(repo_builder.path()))
    assert report.to_dict()["languageStats"] == {
        "typescript": {"count": 2, "functionTotal": 2, "classTotal": 0}
    }
    assert [record.path for record in report.key_files] == ["index.ts", "util.ts"]
    assert parse_tree_view(report.tree_view) == {"index.ts": None, "util.ts": None}
    assert "Functional programming approach with emphasis on functions" in report.insights


def test_analyze_single_file_never_raises(repo_builder: RepoBuilder) -> None:
    _typescript_project(repo_builder)

    record = repobuddy.analyze(repo_builder.path() / "util.ts")
    assert record.error is None
    assert record.syntax_body and record.syntax_body[0].span is not None

    missing = repobuddy.analyze(repo_builder.path() / "gone.ts")
    assert missing.syntax_body is None
    assert missing.error
