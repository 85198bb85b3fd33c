from __future__ import annotations

from .bf_machine import BrainfuckMachine
from .bf_optimizer import optimize as optimize_source
from .bf_parser import TokenSequence, parse, parse_compress


def compile_source(source: str, *, optimize: bool = True, compress: bool = True) -> TokenSequence:
    """Turn Brainfuck source into a resolved token sequence.

    Raises :class:`~tapebf.bf_parser.UnmatchedLoopError` for unbalanced loops.
    """
    if optimize:
        source = optimize_source(source)
    if compress:
        return parse_compress(source)
    return parse(source)


def run_source(
    source: str,
    machine: BrainfuckMachine,
    *,
    optimize: bool = True,
    compress: bool = True,
) -> TokenSequence:
    tokens = compile_source(source, optimize=optimize, compress=compress)
    machine.run(tokens)
    return tokens


__all__ = ["compile_source", "run_source"]
