"""Failure taxonomy for per-file analysis and directory walks."""

from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base class for recoverable analysis failures."""


class UnsupportedLanguage(AnalysisError):
    """Raised when a file extension is not in the supported table."""


class ReadFailure(AnalysisError):
    """Raised when a file cannot be opened or read."""


class ParseFailure(AnalysisError):
    """Raised by parser strategies when a grammar rejects the input."""


class WalkFailure(AnalysisError):
    """Raised when a directory or entry below the root cannot be listed or inspected."""


__all__ = [
    "AnalysisError",
    "ParseFailure",
    "ReadFailure",
    "UnsupportedLanguage",
    "WalkFailure",
]
