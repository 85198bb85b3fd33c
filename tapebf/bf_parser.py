from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .bf_token import Token, TokenKind


class UnmatchedLoopError(Exception):
    """Raised when a loop bracket has no partner.

    ``index`` is the position in the token sequence of the offending token:
    the stray ``]`` itself, or the innermost ``[`` left open at the end.
    """

    def __init__(self, index: int) -> None:
        super().__init__(f"Unclosed loop at token {index}")
        self.index = index


TokenSequence = Tuple[Token, ...]

_ARITHMETIC = (TokenKind.INCREMENT, TokenKind.DECREMENT)
_MOVES = (TokenKind.MOVE_LEFT, TokenKind.MOVE_RIGHT)


def tokenize(source: str) -> List[Token]:
    return [Token.from_char(ch) for ch in source]


def resolve_jumps(tokens: Iterable[Token]) -> TokenSequence:
    resolved = list(tokens)
    stack: List[int] = []
    for index, token in enumerate(resolved):
        if token.kind is TokenKind.LOOP_START:
            stack.append(index)
        elif token.kind is TokenKind.LOOP_END:
            if not stack:
                raise UnmatchedLoopError(index)
            start = stack.pop()
            resolved[start] = resolved[start].with_target(index)
            resolved[index] = token.with_target(start)
    if stack:
        raise UnmatchedLoopError(stack[-1])
    return tuple(resolved)


def compress(tokens: Sequence[Token]) -> List[Token]:
    """Merge runs of +/- and of </> into single counted tokens.

    Any token of a different class ends the run, so ``+x+`` stays as two
    increments around the no-op. Runs that sum to zero disappear.
    """
    compressed: List[Token] = []
    delta = 0
    shift = 0

    def flush_delta() -> None:
        nonlocal delta
        if delta > 0:
            compressed.append(Token.increment(delta))
        elif delta < 0:
            compressed.append(Token.decrement(-delta))
        delta = 0

    def flush_shift() -> None:
        nonlocal shift
        if shift > 0:
            compressed.append(Token.move_right(shift))
        elif shift < 0:
            compressed.append(Token.move_left(-shift))
        shift = 0

    for token in tokens:
        kind = token.kind
        if kind in _ARITHMETIC:
            flush_shift()
            count = int(token.value)  # type: ignore[arg-type]
            delta += count if kind is TokenKind.INCREMENT else -count
        elif kind in _MOVES:
            flush_delta()
            count = int(token.value)  # type: ignore[arg-type]
            shift += count if kind is TokenKind.MOVE_RIGHT else -count
        else:
            flush_delta()
            flush_shift()
            compressed.append(token)
    flush_delta()
    flush_shift()
    return compressed


def parse(source: str) -> TokenSequence:
    return resolve_jumps(tokenize(source))


def parse_compress(source: str) -> TokenSequence:
    return resolve_jumps(compress(tokenize(source)))


__all__ = [
    "TokenSequence",
    "UnmatchedLoopError",
    "compress",
    "parse",
    "parse_compress",
    "resolve_jumps",
    "tokenize",
]
