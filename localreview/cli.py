"""CLI entrypoints for localreview commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .errors import ReviewError
from .logging import configure_logging
from .orchestrator import ReviewOrchestrator


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    log_file_kwargs: dict[str, object] = {
        "type": Path,
        "help": "Also write logs to this file.",
    }
    if suppress_default:
        verbose_kwargs["default"] = argparse.SUPPRESS
        log_file_kwargs["default"] = argparse.SUPPRESS
    else:
        verbose_kwargs["default"] = False
        log_file_kwargs["default"] = None
    parser.add_argument("-v", "--verbose", **verbose_kwargs)
    parser.add_argument("--log-file", **log_file_kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localreview",
        description="Review uncommitted changes with static analysis and an AI reviewer.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    review_parser = subparsers.add_parser(
        "review",
        help="Review local, uncommitted changes and print the reviewer's JSON.",
    )
    _add_logging_options(review_parser, suppress_default=True)
    review_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Expose the review operation over HTTP.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for localreview commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "review":
        try:
            output = ReviewOrchestrator(args.path).run_review()
        except (ConfigError, ReviewError) as exc:
            parser.exit(1, f"localreview review failed: {exc}\nRun with --verbose for more details.\n")
        sys.stdout.write(output if output.endswith("\n") else f"{output}\n")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
