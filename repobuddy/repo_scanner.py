"""Directory walking that turns a source tree into an analysis set."""

from __future__ import annotations

import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from .config import RepoBuddyConfig
from .errors import WalkFailure
from .file_analyzer import FileAnalyzer
from .logging import get_logger
from .models import FileMetadata, FileRecord, Language


@dataclass(frozen=True)
class _Target:
    """A file to analyze, or a directory that could not be listed."""

    rel_path: str
    path: Path
    failure: Optional[str] = None


def resolve_root(root: str | Path) -> Path:
    """Validate ``root`` and return it resolved; raise on any fatal condition."""
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise FileNotFoundError(f"Repository path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Repository path is not a directory: {root}")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PermissionError(f"Repository path is not readable: {root}")
    return root_path.resolve()


def walk_failure_record(rel_path: str, failure: str) -> FileRecord:
    """Synthetic record standing in for a subtree that could not be listed."""
    return FileRecord(
        path=rel_path,
        language=Language.UNKNOWN,
        syntax_body=None,
        metadata=FileMetadata(),
        error=failure,
    )


class TreeWalker:
    """Walks a repository and analyzes every supported file exactly once."""

    def __init__(
        self,
        analyzer: FileAnalyzer | None = None,
        config: RepoBuddyConfig | None = None,
    ) -> None:
        if analyzer is None:
            analyzer = FileAnalyzer(config)
        self.analyzer = analyzer
        self.config = config or analyzer.config
        self.logger = get_logger("repo_scanner")

    def walk(self, root: str | Path, *, timeout: float | None = None) -> List[FileRecord]:
        """Return the analysis set for ``root``.

        When ``timeout`` elapses the walk stops scheduling files and returns the
        records collected so far, which remain a valid prefix of the full set.
        """
        root_path = resolve_root(root)
        deadline = time.monotonic() + timeout if timeout is not None else None
        self.logger.debug("Walking %s", root_path)

        if self.config.analysis.max_workers > 1:
            records = list(self._iter_parallel(root_path, deadline))
        else:
            records = list(self._iter_sequential(root_path, deadline))

        self.logger.debug("Walk of %s produced %d records", root_path, len(records))
        return records

    def iter_targets(self, root_path: Path) -> Iterator[_Target]:
        """Yield files in deterministic (per-directory lexicographic) order."""
        yield from self._iter_directory(root_path, "", is_root=True)

    def _iter_directory(self, directory: Path, rel_dir: str, *, is_root: bool = False) -> Iterator[_Target]:
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            if is_root:
                raise
            failure = WalkFailure(f"walk failure: {exc.strerror or exc}")
            self.logger.warning("Could not list %s: %s", rel_dir, failure)
            yield _Target(rel_path=rel_dir, path=directory, failure=str(failure))
            return

        excluded = self.config.excluded_directory_names
        supported = self.analyzer.supported_extensions
        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                failure = WalkFailure(f"walk failure: {exc.strerror or exc}")
                self.logger.warning("Could not stat %s: %s", rel_path, failure)
                yield _Target(rel_path=rel_path, path=Path(entry.path), failure=str(failure))
                continue
            if is_dir:
                if entry.name in excluded:
                    self.logger.debug("Skipping excluded directory %s", rel_path)
                    continue
                yield from self._iter_directory(Path(entry.path), rel_path)
            elif is_file and Path(entry.name).suffix.lower() in supported:
                yield _Target(rel_path=rel_path, path=Path(entry.path))

    def _analyze_target(self, target: _Target) -> FileRecord:
        if target.failure is not None:
            return walk_failure_record(target.rel_path, target.failure)
        return self.analyzer.analyze(target.path, display_path=target.rel_path)

    def _iter_sequential(self, root_path: Path, deadline: float | None) -> Iterator[FileRecord]:
        for target in self.iter_targets(root_path):
            if _expired(deadline):
                self.logger.warning("Walk timeout reached; returning partial results")
                return
            yield self._analyze_target(target)

    def _iter_parallel(self, root_path: Path, deadline: float | None) -> Iterator[FileRecord]:
        targets = list(self.iter_targets(root_path))
        settings = self.config.analysis
        executor = ThreadPoolExecutor(
            max_workers=settings.max_workers, thread_name_prefix="repobuddy-analyze"
        )
        try:
            futures: List[Future[FileRecord]] = [
                executor.submit(self._analyze_target, target) for target in targets
            ]
            # Futures are consumed in submission order so output matches the sequential walk.
            for target, future in zip(targets, futures):
                if _expired(deadline):
                    self.logger.warning("Walk timeout reached; returning partial results")
                    return
                try:
                    yield future.result(timeout=settings.file_timeout)
                except FutureTimeoutError:
                    future.cancel()
                    self.logger.warning(
                        "Analysis of %s exceeded %ss", target.rel_path, settings.file_timeout
                    )
                    yield FileRecord(
                        path=target.rel_path,
                        language=self.analyzer.language_for(target.path),
                        syntax_body=None,
                        metadata=FileMetadata(),
                        error=f"analysis timed out after {settings.file_timeout}s",
                    )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


def _expired(deadline: float | None) -> bool:
    return deadline is not None and time.monotonic() >= deadline


__all__ = ["TreeWalker", "resolve_root", "walk_failure_record"]
