"""Parsing of the text commands the engine understands.

Moves are written in ICCS style, ``a0b1``: a column letter ``a``-``i``
followed by a row digit ``0``-``9`` for the source and then the destination,
with row ``0`` on red's side.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

from .pregen import COLS, ROWS, coord_pc, get_rel_col, get_rel_row, in_board

START_FEN = "rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR"

_COL_LETTERS = "abcdefghi"


class UcciType(enum.IntEnum):
    """The kind of a parsed command."""

    UCCI = 0
    ISREADY = 1
    POSITION = 2
    GO = 3
    STOP = 4
    QUIT = 5
    GETPOS = 6
    GETMV = 7
    MAKEMV = 8
    POS_ERROR = 9


@dataclass(frozen=True)
class UcciCommand:
    """A parsed command.

    ``fen`` and ``side`` are set by ``position``; ``moves`` holds the packed
    moves of ``position ... moves`` or the single move of ``makemv``;
    ``square`` is the square asked about by ``getmv``.
    """

    kind: UcciType
    fen: Optional[str] = None
    moves: tuple[int, ...] = ()
    side: int = 0
    square: Optional[int] = None


def _parse_square(text: str) -> int:
    if len(text) != 2:
        raise ValueError(f"not a square: {text!r}")
    letter, digit = text[0].lower(), text[1]
    col = _COL_LETTERS.find(letter)
    if col < 0 or not digit.isdigit() or not digit.isascii():
        raise ValueError(f"not a square: {text!r}")
    return coord_pc(ROWS - 1 - int(digit), col)


def _format_square(pos: int) -> str:
    if not in_board(pos):
        raise ValueError(f"square off the board: {pos!r}")
    return f"{_COL_LETTERS[get_rel_col(pos)]}{ROWS - 1 - get_rel_row(pos)}"


def to_array_coord(mv: str) -> int:
    """Turn a move such as ``h2e2`` into a packed move: source low, destination high."""
    if len(mv) != 4:
        raise ValueError(f"not a move: {mv!r}")
    src = _parse_square(mv[:2])
    dst = _parse_square(mv[2:])
    return (dst << 8) | src


def to_ucci_coord(mv: int) -> str:
    """Turn a packed move back into its four-letter text form."""
    return _format_square(mv & 0xFF) + _format_square((mv >> 8) & 0xFF)


class UcciParser:
    """Turns command lines into :class:`UcciCommand` values."""

    _SIMPLE = {
        "ucci": UcciType.UCCI,
        "isready": UcciType.ISREADY,
        "go": UcciType.GO,
        "stop": UcciType.STOP,
        "quit": UcciType.QUIT,
        "getpos": UcciType.GETPOS,
    }

    def __init__(self, start_fen: str = START_FEN) -> None:
        self.start_fen = start_fen

    def process_command(self, command: str) -> UcciCommand:
        """Parse one command line; unknown or malformed commands give ``POS_ERROR``."""
        args = command.split()
        if not args:
            return UcciCommand(UcciType.POS_ERROR)
        name, rest = args[0], args[1:]
        try:
            if name in self._SIMPLE:
                return UcciCommand(self._SIMPLE[name])
            if name == "position":
                return self._position(rest)
            if name == "getmv":
                return UcciCommand(UcciType.GETMV, square=_parse_square(rest[0]))
            if name == "makemv":
                return UcciCommand(UcciType.MAKEMV, moves=(to_array_coord(rest[0]),))
        except (IndexError, ValueError):
            return UcciCommand(UcciType.POS_ERROR)
        return UcciCommand(UcciType.POS_ERROR)

    def _position(self, rest: Sequence[str]) -> UcciCommand:
        fen = self.start_fen if rest[0] == "startpos" else rest[0]
        side = 1 if len(rest) > 1 and rest[1] == "b" else 0
        moves: tuple[int, ...] = ()
        if "moves" in rest:
            start = list(rest).index("moves") + 1
            moves = tuple(to_array_coord(text) for text in rest[start:])
        return UcciCommand(UcciType.POSITION, fen=fen, moves=moves, side=side)


__all__ = [
    "COLS",
    "START_FEN",
    "UcciCommand",
    "UcciParser",
    "UcciType",
    "to_array_coord",
    "to_ucci_coord",
]