"""Configuration loading for repobuddy (.repobuddy.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

import yaml

from .logging import get_logger
from .models import Language

CONFIG_FILENAME = ".repobuddy.yml"

DEFAULT_EXCLUDED_DIRECTORY_NAMES: FrozenSet[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "bower_components",
        "vendor",
        ".venv",
        "venv",
        "dist",
        "build",
        "out",
        "target",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
    }
)

DEFAULT_SUPPORTED_EXTENSIONS: Mapping[str, Language] = {
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".py": Language.PYTHON,
    ".java": Language.JAVA,
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".cpp": Language.CPP,
    ".c": Language.C,
    ".cs": Language.CSHARP,
    ".php": Language.PHP,
    ".rb": Language.RUBY,
}


# Settings naming a program to execute; only callers may set them.
_CALLER_ONLY_ANALYSIS_KEYS: FrozenSet[str] = frozenset({"python_executable"})

_logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AnalysisConfig:
    """Per-file analysis and walk execution settings."""

    max_workers: int = 1
    parse_timeout: float = 10.0
    file_timeout: float = 30.0
    native_parsers: bool = True
    python_interpreter: bool = True
    python_executable: Optional[str] = None
    native_depth: int = 3
    snippet_length: int = 80
    read_timeout: float = 10.0
    extended_symbol_kinds: bool = False


@dataclass
class ScoringConfig:
    """Weights for the key-file importance score."""

    entry_point_hints: List[str] = field(
        default_factory=lambda: ["index", "main", "app", "server"]
    )
    entry_point_bonus: int = 50
    moderate_size_bonus: int = 20
    moderate_min_lines: int = 50
    moderate_max_lines: int = 500
    function_weight: int = 5
    class_weight: int = 10
    import_weight: int = 2
    import_cap: int = 20
    key_file_limit: int = 10


@dataclass
class InsightConfig:
    """Thresholds for the architecture insight heuristics."""

    multi_language_threshold: int = 3
    object_oriented_ratio: float = 0.5
    functional_ratio: float = 3.0


@dataclass
class RepoBuddyConfig:
    """Represents the settings defined in .repobuddy.yml."""

    root: Path
    excluded_directory_names: FrozenSet[str] = DEFAULT_EXCLUDED_DIRECTORY_NAMES
    supported_extensions: Dict[str, Language] = field(
        default_factory=lambda: dict(DEFAULT_SUPPORTED_EXTENSIONS)
    )
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    insights: InsightConfig = field(default_factory=InsightConfig)


def default_config(root: Path | None = None) -> RepoBuddyConfig:
    """Return the built-in configuration rooted at ``root`` (cwd by default)."""
    return RepoBuddyConfig(root=(root or Path.cwd()).resolve())


def load_config(config_path: Path) -> RepoBuddyConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RepoBuddyConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = RepoBuddyConfig(root=root)

    excluded = _lookup(data, "excludedDirectoryNames", "excluded_directory_names")
    if excluded is not None:
        config.excluded_directory_names = frozenset(_as_str_list(excluded))

    extensions = _lookup(data, "supportedExtensions", "supported_extensions")
    if extensions is not None:
        config.supported_extensions = _parse_extensions(extensions)

    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        analysis = config.analysis
        analysis.max_workers = max(1, _as_int(analysis_data.get("max_workers"), analysis.max_workers))
        analysis.parse_timeout = _as_float(analysis_data.get("parse_timeout"), analysis.parse_timeout)
        analysis.file_timeout = _as_float(analysis_data.get("file_timeout"), analysis.file_timeout)
        analysis.native_parsers = _as_bool(analysis_data.get("native_parsers"), analysis.native_parsers)
        analysis.python_interpreter = _as_bool(
            analysis_data.get("python_interpreter"), analysis.python_interpreter
        )
        analysis.native_depth = _as_int(analysis_data.get("native_depth"), analysis.native_depth)
        analysis.snippet_length = _as_int(analysis_data.get("snippet_length"), analysis.snippet_length)
        analysis.read_timeout = _as_float(analysis_data.get("read_timeout"), analysis.read_timeout)
        analysis.extended_symbol_kinds = _as_bool(
            analysis_data.get("extended_symbol_kinds"), analysis.extended_symbol_kinds
        )
        for key in _CALLER_ONLY_ANALYSIS_KEYS & analysis_data.keys():
            _logger.warning("Ignoring %s from %s; it can only be set by the caller", key, config_file)

    scoring_data = _as_dict(data.get("scoring"))
    if scoring_data:
        scoring = config.scoring
        hints = scoring_data.get("entry_point_hints")
        if hints is not None:
            scoring.entry_point_hints = [hint.lower() for hint in _as_str_list(hints)]
        for name in (
            "entry_point_bonus",
            "moderate_size_bonus",
            "moderate_min_lines",
            "moderate_max_lines",
            "function_weight",
            "class_weight",
            "import_weight",
            "import_cap",
            "key_file_limit",
        ):
            setattr(scoring, name, _as_int(scoring_data.get(name), getattr(scoring, name)))

    insight_data = _as_dict(data.get("insights"))
    if insight_data:
        insights = config.insights
        insights.multi_language_threshold = _as_int(
            insight_data.get("multi_language_threshold"), insights.multi_language_threshold
        )
        insights.object_oriented_ratio = _as_float(
            insight_data.get("object_oriented_ratio"), insights.object_oriented_ratio
        )
        insights.functional_ratio = _as_float(
            insight_data.get("functional_ratio"), insights.functional_ratio
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _parse_extensions(value: Any) -> Dict[str, Language]:
    if not isinstance(value, dict):
        raise ConfigError("supportedExtensions must be a mapping of extension to language")
    table: Dict[str, Language] = {}
    for raw_ext, raw_language in value.items():
        ext = str(raw_ext).strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        try:
            language = Language(str(raw_language).strip().lower())
        except ValueError as exc:
            raise ConfigError(f"Unknown language '{raw_language}' for extension {ext}") from exc
        if language is Language.UNKNOWN:
            raise ConfigError(f"Extension {ext} cannot map to the unknown language")
        table[ext] = language
    return table


def _lookup(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_EXCLUDED_DIRECTORY_NAMES",
    "DEFAULT_SUPPORTED_EXTENSIONS",
    "InsightConfig",
    "RepoBuddyConfig",
    "ScoringConfig",
    "default_config",
    "load_config",
]
