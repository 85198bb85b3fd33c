from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .bf_machine import DEFAULT_CAPACITY, BrainfuckMachine, BrainfuckRuntimeError
from .bf_parser import UnmatchedLoopError
from .pipeline import compile_source

SOURCE_EXTENSIONS = (".bf", ".b")

logger = logging.getLogger(__name__)


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _tape_size(value: str) -> int:
    size = int(value)
    if size < 1:
        raise argparse.ArgumentTypeError("tape size must be at least 1")
    return size


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a Brainfuck program")
    parser.add_argument("source", help="Path to a Brainfuck source file (.bf or .b)")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run the file even if its extension is not recognised",
    )
    parser.add_argument(
        "--tape-size",
        type=_tape_size,
        default=DEFAULT_CAPACITY,
        help=f"Number of tape cells (default: {DEFAULT_CAPACITY})",
    )
    parser.add_argument(
        "--no-optimize",
        action="store_true",
        help="Skip comment stripping and +-/<> cancellation",
    )
    parser.add_argument(
        "--no-compress",
        action="store_true",
        help="Execute one token per command instead of run-length compressed tokens",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details to stderr")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.force and Path(args.source).suffix.lower() not in SOURCE_EXTENSIONS:
        print(
            f"Unrecognized source extension for {args.source} "
            f"(expected one of {', '.join(SOURCE_EXTENSIONS)}; use --force to override)",
            file=sys.stderr,
        )
        return 2

    try:
        source_text = _read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {args.source}: {exc}", file=sys.stderr)
        return 1

    try:
        tokens = compile_source(
            source_text,
            optimize=not args.no_optimize,
            compress=not args.no_compress,
        )
    except UnmatchedLoopError as exc:
        print(f"Parse error: {exc}", file=sys.stderr)
        return 1
    logger.debug("compiled %d characters into %d tokens", len(source_text), len(tokens))

    machine = BrainfuckMachine.standard(args.tape_size)
    logger.debug("running on a %d-cell tape", machine.capacity)
    try:
        machine.run(tokens)
    except BrainfuckRuntimeError as exc:
        print(f"Runtime error: {exc}", file=sys.stderr)
        return 1
    finally:
        sys.stdout.flush()
        machine.output_stream.flush()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
