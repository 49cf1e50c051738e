"""Per-file analysis: language dispatch, parsing with fallback, metadata."""

from __future__ import annotations

import stat
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .analyzers import ParserStrategy, StrategyTable, build_strategies
from .analyzers.metadata import collect_metadata
from .config import RepoBuddyConfig, default_config
from .errors import ParseFailure, ReadFailure, UnsupportedLanguage
from .logging import get_logger
from .models import FileMetadata, FileRecord, Language, StructuralNode

UNSUPPORTED_EXTENSION = "unsupported extension"


class FileAnalyzer:
    """Turns one file path into a normalized ``FileRecord``; never raises."""

    def __init__(
        self,
        config: RepoBuddyConfig | None = None,
        strategies: StrategyTable | None = None,
    ) -> None:
        self.config = config or default_config()
        self._strategies = strategies if strategies is not None else build_strategies(self.config.analysis)
        self.logger = get_logger("file_analyzer")

    @property
    def supported_extensions(self) -> Mapping[str, Language]:
        return self.config.supported_extensions

    def language_for(self, path: str | Path) -> Language:
        """Return the language for ``path`` based purely on its extension."""
        suffix = Path(path).suffix.lower()
        return self.config.supported_extensions.get(suffix, Language.UNKNOWN)

    def analyze(self, path: str | Path, *, display_path: str | None = None) -> FileRecord:
        """Analyze ``path``; ``display_path`` overrides the identifier stored on the record."""
        file_path = Path(path)
        record_path = display_path if display_path is not None else str(path)
        language = self.language_for(file_path)

        if language is Language.UNKNOWN:
            failure = UnsupportedLanguage(UNSUPPORTED_EXTENSION)
            self.logger.debug("Skipping %s: %s", record_path, failure)
            return FileRecord(
                path=record_path,
                language=Language.UNKNOWN,
                syntax_body=None,
                metadata=_basic_metadata(file_path, self.config.analysis.read_timeout),
                error=str(failure),
            )

        try:
            raw = _read_bytes(file_path, self.config.analysis.read_timeout)
        except ReadFailure as exc:
            self.logger.debug("Could not read %s: %s", record_path, exc)
            return FileRecord(
                path=record_path,
                language=language,
                syntax_body=None,
                metadata=_stat_metadata(file_path),
                error=str(exc),
            )

        source = raw.decode("utf-8", errors="replace")
        body, error = self._parse(language, source, file_path, record_path)
        metadata = collect_metadata(
            body,
            extended=self.config.analysis.extended_symbol_kinds,
            line_count=_line_count(source),
            byte_size=len(raw),
        )
        return FileRecord(
            path=record_path,
            language=language,
            syntax_body=body,
            metadata=metadata,
            error=error,
        )

    def _parse(
        self, language: Language, source: str, path: Path, record_path: str
    ) -> tuple[Optional[List[StructuralNode]], Optional[str]]:
        strategies: Sequence[ParserStrategy] = self._strategies.get(language, ())
        last_error = f"no parser registered for {language.value}"
        for strategy in strategies:
            try:
                body = strategy.parse(source, path)
            except ParseFailure as exc:
                last_error = str(exc)
                self.logger.debug(
                    "%s strategy failed for %s (%s); falling back", strategy.name, record_path, exc
                )
                continue
            self.logger.debug("Parsed %s with %s strategy", record_path, strategy.name)
            return body, None
        return None, last_error


def _read_file(path: Path) -> bytes:
    with path.open("rb") as handle:
        return handle.read()


def _read_bytes(path: Path, timeout: float) -> bytes:
    """Read a regular file, giving up after ``timeout`` seconds."""
    try:
        info = path.stat()
    except OSError as exc:
        raise ReadFailure(str(exc)) from exc
    if not stat.S_ISREG(info.st_mode):
        raise ReadFailure(f"not a regular file: {path.name}")

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="repobuddy-read")
    future = executor.submit(_read_file, path)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        raise ReadFailure(f"read timed out after {timeout}s") from exc
    except OSError as exc:
        raise ReadFailure(str(exc)) from exc
    finally:
        executor.shutdown(wait=False)


def _line_count(source: str) -> int:
    return source.count("\n") + 1


def _stat_metadata(path: Path) -> FileMetadata:
    try:
        size = path.stat().st_size
    except OSError:
        return FileMetadata()
    return FileMetadata(line_count=0, byte_size=size)


def _basic_metadata(path: Path, timeout: float) -> FileMetadata:
    try:
        raw = _read_bytes(path, timeout)
    except ReadFailure:
        return _stat_metadata(path)
    return FileMetadata(
        line_count=_line_count(raw.decode("utf-8", errors="replace")),
        byte_size=len(raw),
    )


__all__ = ["FileAnalyzer", "UNSUPPORTED_EXTENSION"]
