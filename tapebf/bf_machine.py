from __future__ import annotations

import io
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Sequence

from .bf_token import Token, TokenKind

DEFAULT_CAPACITY = 30000


class BrainfuckRuntimeError(RuntimeError):
    """Raised when a running program cannot continue (I/O failure, bad token)."""


@dataclass
class BrainfuckMachine:
    """A byte tape with a wrapping cursor that executes parsed token sequences.

    Tape contents and the cursor persist between calls to :meth:`run`, so
    several programs can be run one after another against the same memory.
    """

    capacity: int = DEFAULT_CAPACITY
    input_stream: BinaryIO = field(default_factory=io.BytesIO, repr=False)
    output_stream: BinaryIO = field(default_factory=io.BytesIO, repr=False)

    memory: bytearray = field(init=False, repr=False)
    cursor: int = field(init=False)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("Tape capacity must be at least one cell")
        self.reset()

    @classmethod
    def standard(cls, capacity: int = DEFAULT_CAPACITY) -> "BrainfuckMachine":
        """Build a machine bound to the process's standard input and output."""
        return cls(capacity, sys.stdin.buffer, sys.stdout.buffer)

    def reset(self) -> None:
        self.memory = bytearray(self.capacity)
        self.cursor = 0

    def run(self, tokens: Sequence[Token]) -> None:
        memory = self.memory
        size = len(memory)
        cursor = self.cursor
        pc = 0
        end = len(tokens)

        try:
            while pc < end:
                token = tokens[pc]
                kind = token.kind
                if kind is TokenKind.INCREMENT:
                    memory[cursor] = (memory[cursor] + token.value) & 0xFF
                elif kind is TokenKind.DECREMENT:
                    memory[cursor] = (memory[cursor] - token.value) & 0xFF
                elif kind is TokenKind.MOVE_RIGHT:
                    cursor = (cursor + token.value) % size
                elif kind is TokenKind.MOVE_LEFT:
                    cursor = (cursor - token.value) % size
                elif kind is TokenKind.LOOP_START:
                    if memory[cursor] == 0:
                        pc = self._jump_target(token, pc) + 1
                        continue
                elif kind is TokenKind.LOOP_END:
                    if memory[cursor] != 0:
                        pc = self._jump_target(token, pc) + 1
                        continue
                elif kind is TokenKind.OUTPUT:
                    self._write(memory[cursor])
                elif kind is TokenKind.INPUT:
                    memory[cursor] = self._read()
                pc += 1
        finally:
            self.cursor = cursor

    def _jump_target(self, token: Token, pc: int) -> int:
        target = token.target
        if target is None:
            raise BrainfuckRuntimeError(f"Loop token at {pc} has no resolved jump target")
        return target

    def _write(self, value: int) -> None:
        try:
            self.output_stream.write(bytes((value,)))
        except OSError as exc:
            raise BrainfuckRuntimeError(f"Failed to write output: {exc}") from exc

    def _read(self) -> int:
        try:
            data = self.input_stream.read(1)
        except OSError as exc:
            raise BrainfuckRuntimeError(f"Failed to read input: {exc}") from exc
        if not data:
            raise BrainfuckRuntimeError("Input stream exhausted")
        return data[0]


__all__ = [
    "DEFAULT_CAPACITY",
    "BrainfuckMachine",
    "BrainfuckRuntimeError",
]
