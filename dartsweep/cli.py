"""CLI entrypoint for dartsweep."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .checkers import BUILTIN_CHECKERS
from .config import ConfigError
from .graph import EntryPointError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .pubspec import ManifestError
from .report import render_json, render_text

EXIT_CLEAN = 0
EXIT_UNUSED = 1
EXIT_FATAL = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dartsweep",
        description="Find unused files, dependencies, assets, translations and locator registrations in a Dart project.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "-e",
        "--entry",
        action="append",
        dest="entries",
        metavar="FILE",
        help="Entry point relative to the project root. Repeat for several (default: lib/main.dart).",
    )
    parser.add_argument(
        "-c",
        "--check",
        action="append",
        dest="checks",
        metavar="NAME",
        help=f"Run only the named checker. Repeat for several (built-in: {', '.join(BUILTIN_CHECKERS)}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .dartsweep.yml file (defaults to the one in the project root).",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity and include diagnostics in the report.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run an analysis and return the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()
    try:
        report = orchestrator.run(
            args.path,
            entry_points=args.entries,
            enabled=args.checks,
            config_path=args.config,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(EXIT_FATAL, f"{exc}\n")
    except (ConfigError, ManifestError, EntryPointError) as exc:
        parser.exit(EXIT_FATAL, f"dartsweep failed: {exc}\n")
    except ValueError as exc:
        parser.exit(EXIT_FATAL, f"dartsweep failed: {exc}\nRun with --verbose for more details.\n")

    if args.format == "json":
        print(render_json(report, verbose=bool(args.verbose)))
    else:
        print(render_text(report, verbose=bool(args.verbose)))
    return EXIT_UNUSED if report.has_unused else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
