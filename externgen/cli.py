"""CLI entrypoint for externgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ExternGenConfig, load_config
from .errors import ExternGenError
from .logging import configure_logging
from .runner import ExternRunner

USAGE_LINES = (
    "Usage: externgen [file ...]",
    "Example: externgen a.d.ts a.externs",
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="externgen",
        description="List every qualified name declared by a TypeScript declaration file.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="file",
        help="Input declaration file, optionally followed by the output path.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not echo the generated names; log only warnings to the console.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .externgen.yml file (defaults to the input file's directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    return parser


def print_usage() -> None:
    for line in USAGE_LINES:
        print(line)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for externgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.paths:
        print_usage()
        return
    if len(args.paths) > 2:
        parser.error("expected an input file and at most one output file")

    input_path = Path(args.paths[0])
    output_path = Path(args.paths[1]) if len(args.paths) == 2 else None

    try:
        config = load_config(args.config or input_path.parent)
    except ExternGenError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=args.log_file or config.log_file,
    )

    runner = ExternRunner(
        output_extension=config.output_extension,
        mirror=sys.stdout if _echo_enabled(args, config) else None,
    )
    try:
        runner.run(input_path, output_path)
    except ExternGenError as exc:
        parser.exit(1, f"externgen failed: {exc}\nRun with --verbose for more details.\n")
    except OSError as exc:
        parser.exit(1, f"externgen failed: {exc}\nRun with --verbose for more details.\n")


def _echo_enabled(args: argparse.Namespace, config: ExternGenConfig) -> bool:
    return config.echo and not args.quiet


if __name__ == "__main__":
    main(sys.argv[1:])
