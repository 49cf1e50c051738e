"""Pipeline orchestration: configuration, walk, aggregation and rendering."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from .config import RepoBuddyConfig, load_config
from .file_analyzer import FileAnalyzer
from .guide import GUIDE_FILENAME, JSON_FILENAME, GuideRenderer
from .insights import Aggregator
from .logging import get_logger
from .models import FileRecord, Report
from .repo_scanner import TreeWalker, resolve_root

OUTPUT_FORMATS = ("markdown", "json")

WalkerFactory = Callable[[RepoBuddyConfig], TreeWalker]


def _default_walker(config: RepoBuddyConfig) -> TreeWalker:
    return TreeWalker(FileAnalyzer(config), config)


class Orchestrator:
    """Coordinates the guide pipeline for a local repository."""

    def __init__(
        self,
        walker_factory: WalkerFactory | None = None,
        renderer: GuideRenderer | None = None,
    ) -> None:
        self._walker_factory = walker_factory or _default_walker
        self.renderer = renderer or GuideRenderer()
        self.logger = get_logger("orchestrator")

    def load_config(
        self,
        repo_path: Path,
        *,
        max_workers: Optional[int] = None,
        python_executable: Optional[str] = None,
    ) -> RepoBuddyConfig:
        config = load_config(repo_path)
        if max_workers is not None:
            config.analysis = replace(config.analysis, max_workers=max(1, max_workers))
        if python_executable is not None:
            config.analysis = replace(config.analysis, python_executable=python_executable)
        return config

    def build_report(
        self,
        path: str | Path,
        *,
        config: RepoBuddyConfig | None = None,
        timeout: float | None = None,
        max_workers: Optional[int] = None,
        python_executable: Optional[str] = None,
    ) -> Report:
        """Walk ``path`` and aggregate the resulting analysis set."""
        repo_path = resolve_root(path)
        self.logger.info("Analyzing repository structure of %s", repo_path)
        config = config or self.load_config(
            repo_path, max_workers=max_workers, python_executable=python_executable
        )

        walker = self._walker_factory(config)
        records = walker.walk(repo_path, timeout=timeout)
        self.logger.debug("Walker produced %d file records", len(records))

        aggregator = Aggregator(config.scoring, config.insights)
        return aggregator.aggregate(records, root=str(repo_path))

    def run_guide(
        self,
        path: str | Path,
        *,
        output: str | Path | None = None,
        output_format: str = "markdown",
        timeout: float | None = None,
        max_workers: Optional[int] = None,
        python_executable: Optional[str] = None,
    ) -> Path:
        """Generate the guide for ``path`` and return where it was written."""
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {output_format}")

        report = self.build_report(
            path, timeout=timeout, max_workers=max_workers, python_executable=python_executable
        )
        self.logger.info("Generating guide...")
        if output_format == "json":
            content = self.renderer.render_json(report)
            default_name = JSON_FILENAME
        else:
            content = self.renderer.render_markdown(report)
            default_name = GUIDE_FILENAME

        target = Path(output).expanduser() if output else Path(report.root) / default_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        self.logger.info("Guide written to %s", target)
        return target

    def analyze_file(self, path: str | Path) -> FileRecord:
        """Analyze a single file using the configuration found beside it."""
        file_path = Path(path).expanduser()
        config = load_config(file_path.parent)
        return FileAnalyzer(config).analyze(file_path)


__all__ = ["OUTPUT_FORMATS", "Orchestrator"]
