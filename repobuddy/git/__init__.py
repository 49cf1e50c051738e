"""Repository acquisition helpers."""

from .clone import CloneError, RepoCloner, default_destination

__all__ = ["CloneError", "RepoCloner", "default_destination"]
