from __future__ import annotations

from typing import List

from .bf_token import COMMAND_CHARS

_INVERSES = {
    "+": "-",
    "-": "+",
    "<": ">",
    ">": "<",
}


def strip_comments(source: str) -> str:
    return "".join(ch for ch in source if ch in COMMAND_CHARS)


def cancel_inverse_pairs(source: str) -> str:
    # Looks one character back only; "+-+" leaves "+".
    result: List[str] = []
    for ch in source:
        if result and _INVERSES.get(ch) == result[-1]:
            result.pop()
            continue
        result.append(ch)
    return "".join(result)


def optimize(source: str) -> str:
    """Shrink ``source`` without changing what it does when run."""
    return cancel_inverse_pairs(strip_comments(source))


__all__ = [
    "cancel_inverse_pairs",
    "optimize",
    "strip_comments",
]
