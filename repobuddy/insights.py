"""Aggregation of an analysis set into statistics, key files and insights."""

from __future__ import annotations

import posixpath
from typing import Callable, Dict, List, Optional, Sequence

from .config import InsightConfig, ScoringConfig
from .logging import get_logger
from .models import FileRecord, Language, LanguageStats, Report
from .tree_view import build_tree, render_tree

_COMPONENT_EXTENSIONS = (".jsx", ".tsx")
_STATE_PATH_TOKENS = ("slice", "store")
_STATE_IMPORT_TOKEN = "redux"
_ROUTING_IMPORT_TOKEN = "router"
_API_PATH_TOKENS = ("api", "service")
_API_FUNCTION_TOKEN = "fetch"
_TEST_PATH_TOKENS = ("test", "spec")
_CONFIG_MARKERS = (
    "package.json",
    "requirements.txt",
    "Cargo.toml",
    "pom.xml",
    "vite.config",
    "tailwind.config",
)
_CSS_FRAMEWORK_TOKEN = "tailwind"
_STYLESHEET_EXTENSIONS = (".css", ".scss")
_FEATURE_PATH_TOKEN = "features"

InsightRule = Callable[[Sequence[FileRecord]], Optional[str]]


class Aggregator:
    """Derives language stats, key files, a tree view and insights from records."""

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        insights: InsightConfig | None = None,
    ) -> None:
        self.scoring = scoring or ScoringConfig()
        self.insight_config = insights or InsightConfig()
        self.logger = get_logger("insights")

    def aggregate(self, records: Sequence[FileRecord], *, root: str = "") -> Report:
        tree = build_tree(record.path for record in records)
        report = Report(
            root=root,
            records=list(records),
            language_stats=self.language_stats(records),
            key_files=self.key_files(records),
            tree=tree,
            tree_view=render_tree(tree),
            insights=self.insights(records),
        )
        self.logger.debug(
            "Aggregated %d records into %d languages and %d insights",
            len(records),
            len(report.language_stats),
            len(report.insights),
        )
        return report

    @staticmethod
    def language_stats(records: Sequence[FileRecord]) -> Dict[str, LanguageStats]:
        """Group by language, ordered by descending file count (ties keep first-seen order)."""
        stats: Dict[str, LanguageStats] = {}
        for record in records:
            entry = stats.setdefault(record.language.value, LanguageStats())
            entry.count += 1
            entry.function_total += len(record.metadata.function_names)
            entry.class_total += len(record.metadata.class_names)
        return dict(sorted(stats.items(), key=lambda item: -item[1].count))

    def importance_score(self, record: FileRecord) -> int:
        scoring = self.scoring
        metadata = record.metadata
        score = 0

        filename = posixpath.basename(record.path.replace("\\", "/")).lower()
        if any(hint.lower() in filename for hint in scoring.entry_point_hints):
            score += scoring.entry_point_bonus

        if scoring.moderate_min_lines < metadata.line_count < scoring.moderate_max_lines:
            score += scoring.moderate_size_bonus

        score += len(metadata.function_names) * scoring.function_weight
        score += len(metadata.class_names) * scoring.class_weight
        score += min(len(metadata.import_names) * scoring.import_weight, scoring.import_cap)
        return score

    def key_files(self, records: Sequence[FileRecord]) -> List[FileRecord]:
        """Return the top files by importance; ``sorted`` is stable so ties keep input order."""
        ranked = sorted(records, key=self.importance_score, reverse=True)
        return ranked[: self.scoring.key_file_limit]

    def insights(self, records: Sequence[FileRecord]) -> List[str]:
        results: List[str] = []
        for rule in self._rules():
            message = rule(records)
            if message:
                results.append(message)
        return results

    def _rules(self) -> List[InsightRule]:
        return [
            self._multi_language,
            _component_files,
            _state_management,
            _routing,
            _api_integration,
            self._programming_style,
            _testing,
            _configuration,
            _styling,
            _feature_modules,
        ]

    def _multi_language(self, records: Sequence[FileRecord]) -> Optional[str]:
        languages = {record.language for record in records if record.language is not Language.UNKNOWN}
        if len(languages) > self.insight_config.multi_language_threshold:
            return f"Multi-language project with {len(languages)} different programming languages"
        return None

    def _programming_style(self, records: Sequence[FileRecord]) -> Optional[str]:
        function_total = sum(len(record.metadata.function_names) for record in records)
        class_total = sum(len(record.metadata.class_names) for record in records)
        config = self.insight_config
        if class_total > function_total * config.object_oriented_ratio:
            return "Object-oriented architecture with significant use of classes"
        if function_total > class_total * config.functional_ratio:
            return "Functional programming approach with emphasis on functions"
        return None


def _component_files(records: Sequence[FileRecord]) -> Optional[str]:
    count = sum(
        1
        for record in records
        if record.path.endswith(_COMPONENT_EXTENSIONS)
        or any(name[:1].isupper() for name in record.metadata.function_names)
    )
    if count:
        return f"React application with {count} component files"
    return None


def _state_management(records: Sequence[FileRecord]) -> Optional[str]:
    for record in records:
        if any(token in record.path for token in _STATE_PATH_TOKENS) or any(
            _STATE_IMPORT_TOKEN in name for name in record.metadata.import_names
        ):
            return "Uses Redux for state management"
    return None


def _routing(records: Sequence[FileRecord]) -> Optional[str]:
    if any(
        _ROUTING_IMPORT_TOKEN in name for record in records for name in record.metadata.import_names
    ):
        return "Implements client-side routing"
    return None


def _api_integration(records: Sequence[FileRecord]) -> Optional[str]:
    for record in records:
        if any(token in record.path for token in _API_PATH_TOKENS) or any(
            _API_FUNCTION_TOKEN in name.lower() for name in record.metadata.function_names
        ):
            return "Includes API integration and data fetching"
    return None


def _testing(records: Sequence[FileRecord]) -> Optional[str]:
    if any(token in record.path for record in records for token in _TEST_PATH_TOKENS):
        return "Includes test files - good testing practices"
    return None


def _configuration(records: Sequence[FileRecord]) -> Optional[str]:
    if any(marker in record.path for record in records for marker in _CONFIG_MARKERS):
        return "Well-structured project with proper configuration files"
    return None


def _styling(records: Sequence[FileRecord]) -> Optional[str]:
    if any(_CSS_FRAMEWORK_TOKEN in record.path for record in records):
        return "Uses Tailwind CSS for utility-first styling"
    if any(record.path.endswith(_STYLESHEET_EXTENSIONS) for record in records):
        return "Uses traditional CSS/SCSS for styling"
    return None


def _feature_modules(records: Sequence[FileRecord]) -> Optional[str]:
    if any(_FEATURE_PATH_TOKEN in record.path for record in records):
        return "Organized by features - good modular architecture"
    return None


def aggregate(
    records: Sequence[FileRecord],
    *,
    root: str = "",
    scoring: ScoringConfig | None = None,
    insights: InsightConfig | None = None,
) -> Report:
    """Convenience wrapper around ``Aggregator.aggregate``."""
    return Aggregator(scoring, insights).aggregate(records, root=root)


__all__ = ["Aggregator", "aggregate"]
