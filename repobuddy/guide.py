"""Rendering of analysis reports into markdown guides and JSON."""

from __future__ import annotations

import json
import posixpath
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import FileRecord, Report

GUIDE_FILENAME = "REPO_GUIDE.md"
JSON_FILENAME = "repo_guide.json"


def group_by_language(records: Sequence[FileRecord]) -> Dict[str, List[FileRecord]]:
    """Group records by language, preserving first-seen language order."""
    grouped: Dict[str, List[FileRecord]] = {}
    for record in records:
        grouped.setdefault(record.language.value, []).append(record)
    return grouped


class GuideRenderer:
    """Renders a ``Report`` with the bundled Jinja templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._env.filters["basename"] = lambda value: posixpath.basename(str(value).replace("\\", "/"))

    def render_markdown(
        self,
        report: Report,
        *,
        project_name: str | None = None,
        generated_at: datetime | None = None,
    ) -> str:
        name = project_name or Path(report.root).name or "Repository"
        timestamp = (generated_at or datetime.now(UTC)).isoformat()
        template = self._env.get_template("guide.md.j2")
        return template.render(
            report=report,
            project_name=name,
            generated_at=timestamp,
            grouped=group_by_language(report.records),
        )

    @staticmethod
    def render_json(report: Report) -> str:
        return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"


__all__ = ["GUIDE_FILENAME", "GuideRenderer", "JSON_FILENAME", "group_by_language"]
