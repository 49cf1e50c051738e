"""CLI entrypoints for repobuddy commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError
from .git import CloneError, RepoCloner
from .logging import configure_logging
from .orchestrator import OUTPUT_FORMATS, Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repobuddy",
        description="Analyze source repositories and generate orientation guides.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    guide_parser = subparsers.add_parser(
        "guide",
        help="Walk a repository and write a guide describing it.",
    )
    _add_verbose_option(guide_parser, suppress_default=True)
    guide_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    guide_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Where to write the guide (defaults to REPO_GUIDE.md in the repository).",
    )
    guide_parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="markdown",
        help="Output format for the guide.",
    )
    guide_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files analyzed concurrently.",
    )
    guide_parser.add_argument(
        "--python-executable",
        default=None,
        help="Interpreter used to parse Python files (defaults to the running interpreter).",
    )
    guide_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Stop walking after this many seconds and report what was collected.",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a single file and print its record as JSON.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("file", help="Path to the source file.")

    clone_parser = subparsers.add_parser(
        "clone",
        help="Clone a remote repository for analysis.",
    )
    _add_verbose_option(clone_parser, suppress_default=True)
    clone_parser.add_argument("url", help="Repository URL to clone.")
    clone_parser.add_argument(
        "destination",
        nargs="?",
        default=None,
        help="Target directory (defaults to ./repos/<name>).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repobuddy commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(getattr(args, "verbose", False)),
        quiet=args.quiet,
        log_file=args.log_file,
    )

    if args.command == "guide":
        orchestrator = Orchestrator()
        try:
            guide_path = orchestrator.run_guide(
                args.path,
                output=args.output,
                output_format=args.output_format,
                timeout=args.timeout,
                max_workers=args.workers,
                python_executable=args.python_executable,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"Invalid configuration: {exc}\n")
        print(f"Guide written to {_relativize(guide_path)}")
    elif args.command == "analyze":
        try:
            record = Orchestrator().analyze_file(args.file)
        except ConfigError as exc:
            parser.exit(1, f"Invalid configuration: {exc}\n")
        print(json.dumps(record.to_dict(), indent=2))
        if record.error:
            parser.exit(1)
    elif args.command == "clone":
        try:
            target = RepoCloner().clone(args.url, args.destination)
        except CloneError as exc:
            parser.exit(1, f"repobuddy clone failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Repository cloned to {_relativize(target)}")
    elif args.command == "serve":  # pragma: no cover - starts a server
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
