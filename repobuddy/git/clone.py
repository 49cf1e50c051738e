"""Cloning remote repositories into a local working path."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..logging import get_logger

_REPO_NAME = re.compile(r"([^/:]+?)(?:\.git)?/?$")


class CloneError(RuntimeError):
    """Raised when a repository cannot be cloned."""


def default_destination(url: str, base: Path | None = None) -> Path:
    """Return ``<base>/repos/<name>`` for a repository URL."""
    match = _REPO_NAME.search(url.strip())
    name = match.group(1) if match else "repository"
    return (base or Path.cwd()) / "repos" / name


class RepoCloner:
    """Runs ``git clone`` through an injectable command runner."""

    def __init__(self, runner: Optional[Callable[..., str]] = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git.clone")

    def clone(self, url: str, destination: str | Path | None = None, *, depth: int | None = 1) -> Path:
        target = Path(destination).expanduser() if destination else default_destination(url)
        target = target.resolve()
        if target.exists() and (not target.is_dir() or any(target.iterdir())):
            raise CloneError(f"Destination already exists and is not empty: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)

        args: List[str] = ["git", "clone"]
        if depth:
            args.extend(["--depth", str(depth)])
        args.extend([url, str(target)])

        self.logger.info("Cloning %s into %s", url, target)
        try:
            self._runner(args, cwd=target.parent)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
            raise CloneError(f"git clone failed for {url}: {detail or exc}") from exc
        except OSError as exc:
            raise CloneError(f"git is not available: {exc}") from exc
        self.logger.info("Clone completed")
        return target

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["CloneError", "RepoCloner", "default_destination"]
