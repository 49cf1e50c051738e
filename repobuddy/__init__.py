"""Source repository analysis: per-file structure, walks, and aggregate reports."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .config import RepoBuddyConfig
from .file_analyzer import FileAnalyzer
from .insights import Aggregator, aggregate
from .models import FileRecord, Report
from .repo_scanner import TreeWalker


def analyze(path: str | Path, config: RepoBuddyConfig | None = None) -> FileRecord:
    """Analyze a single file; never raises."""
    return FileAnalyzer(config).analyze(path)


def walk(
    root: str | Path,
    config: RepoBuddyConfig | None = None,
    *,
    timeout: float | None = None,
) -> List[FileRecord]:
    """Walk ``root`` and return the analysis set in deterministic order."""
    return TreeWalker(config=config).walk(root, timeout=timeout)


__all__ = [
    "Aggregator",
    "FileAnalyzer",
    "FileRecord",
    "Report",
    "TreeWalker",
    "aggregate",
    "analyze",
    "walk",
]
