from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class TokenKind(str, Enum):
    NO_OP = "no_op"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    LOOP_START = "loop_start"
    LOOP_END = "loop_end"
    OUTPUT = "output"
    INPUT = "input"


COMMAND_KINDS: Dict[str, TokenKind] = {
    "+": TokenKind.INCREMENT,
    "-": TokenKind.DECREMENT,
    "<": TokenKind.MOVE_LEFT,
    ">": TokenKind.MOVE_RIGHT,
    ",": TokenKind.INPUT,
    ".": TokenKind.OUTPUT,
    "[": TokenKind.LOOP_START,
    "]": TokenKind.LOOP_END,
}

COMMAND_CHARS = frozenset(COMMAND_KINDS)

_COUNTED = frozenset(
    {TokenKind.INCREMENT, TokenKind.DECREMENT, TokenKind.MOVE_LEFT, TokenKind.MOVE_RIGHT}
)
_JUMPS = frozenset({TokenKind.LOOP_START, TokenKind.LOOP_END})


@dataclass(frozen=True)
class Token:
    """A single Brainfuck operation.

    ``value`` depends on ``kind``: the original character for ``NO_OP``, a
    repeat count for the arithmetic and move kinds, the index of the matching
    partner for loop tokens (``None`` until resolved), and nothing for I/O.
    """

    kind: TokenKind
    value: Union[int, str, None] = None

    def __post_init__(self) -> None:
        if self.kind in _COUNTED:
            if not isinstance(self.value, int) or self.value < 0:
                raise ValueError(f"{self.kind.value} count must be a non-negative int")
        elif self.kind in _JUMPS:
            if self.value is not None and (not isinstance(self.value, int) or self.value < 0):
                raise ValueError(f"{self.kind.value} target must be a token index")

    @property
    def target(self) -> Optional[int]:
        if self.kind not in _JUMPS:
            return None
        return self.value  # type: ignore[return-value]

    def with_target(self, target: int) -> "Token":
        return Token(self.kind, target)

    @classmethod
    def no_op(cls, char: str) -> "Token":
        return cls(TokenKind.NO_OP, char)

    @classmethod
    def increment(cls, count: int = 1) -> "Token":
        return cls(TokenKind.INCREMENT, count)

    @classmethod
    def decrement(cls, count: int = 1) -> "Token":
        return cls(TokenKind.DECREMENT, count)

    @classmethod
    def move_left(cls, count: int = 1) -> "Token":
        return cls(TokenKind.MOVE_LEFT, count)

    @classmethod
    def move_right(cls, count: int = 1) -> "Token":
        return cls(TokenKind.MOVE_RIGHT, count)

    @classmethod
    def loop_start(cls, target: Optional[int] = None) -> "Token":
        return cls(TokenKind.LOOP_START, target)

    @classmethod
    def loop_end(cls, target: Optional[int] = None) -> "Token":
        return cls(TokenKind.LOOP_END, target)

    @classmethod
    def output(cls) -> "Token":
        return cls(TokenKind.OUTPUT)

    @classmethod
    def input(cls) -> "Token":
        return cls(TokenKind.INPUT)

    @classmethod
    def from_char(cls, char: str) -> "Token":
        kind = COMMAND_KINDS.get(char)
        if kind is None:
            return cls.no_op(char)
        if kind in _COUNTED:
            return cls(kind, 1)
        return cls(kind)


__all__ = [
    "COMMAND_CHARS",
    "COMMAND_KINDS",
    "Token",
    "TokenKind",
]
