from .bf_machine import DEFAULT_CAPACITY, BrainfuckMachine, BrainfuckRuntimeError
from .bf_optimizer import optimize
from .bf_parser import UnmatchedLoopError, parse, parse_compress
from .bf_token import Token, TokenKind
from .pipeline import compile_source, run_source

__all__ = [
    "DEFAULT_CAPACITY",
    "BrainfuckMachine",
    "BrainfuckRuntimeError",
    "Token",
    "TokenKind",
    "UnmatchedLoopError",
    "compile_source",
    "optimize",
    "parse",
    "parse_compress",
    "run_source",
]
