"""Board geometry on a 16x16 array and precomputed move tables.

A square is ``row * 16 + col``; the playing area is rows ``ROW_TOP`` to
``ROW_TOP + 9`` and columns ``COL_LEFT`` to ``COL_LEFT + 8``.  Rows near the
top of the array belong to black, rows near the bottom to red.
"""

from __future__ import annotations

import functools
import random
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .zobrist import ZobristKey, random_key

COL_LEFT = 3
ROW_TOP = 3
ROWS = 10
COLS = 9

BOARD_MASK: tuple[bool, ...] = tuple(
    ROW_TOP <= pos >> 4 < ROW_TOP + ROWS and COL_LEFT <= pos & 0x0F < COL_LEFT + COLS
    for pos in range(256)
)

_FORT_ROWS = frozenset((ROW_TOP, ROW_TOP + 1, ROW_TOP + 2, ROW_TOP + 7, ROW_TOP + 8, ROW_TOP + 9))

FORT_MASK: tuple[bool, ...] = tuple(
    pos >> 4 in _FORT_ROWS and COL_LEFT + 3 <= pos & 0x0F <= COL_LEFT + 5 for pos in range(256)
)

KING_DISPLACEMENTS = (-0x10, -0x01, 0x01, 0x10)
ADVISOR_DISPLACEMENTS = (-0x11, -0x0F, 0x0F, 0x11)
BISHOP_DISPLACEMENTS = (-0x22, -0x1E, 0x1E, 0x22)
KNIGHT_DISPLACEMENTS = (-0x21, -0x12, -0x1F, -0x0E, 0x21, 0x0E, 0x1F, 0x12)

_SPAN_KING, _SPAN_ADVISOR, _SPAN_BISHOP = 1, 2, 3


def _span_table() -> tuple[int, ...]:
    table = [0] * 512
    for value, displacements in (
        (_SPAN_KING, KING_DISPLACEMENTS),
        (_SPAN_ADVISOR, ADVISOR_DISPLACEMENTS),
        (_SPAN_BISHOP, BISHOP_DISPLACEMENTS),
    ):
        for d in displacements:
            table[d + 256] = value
    return tuple(table)


def _knight_pin_table() -> tuple[int, ...]:
    table = [0] * 512
    pins = {-0x21: -0x10, -0x1F: -0x10, -0x12: -0x01, -0x0E: 0x01,
            0x0E: -0x01, 0x12: 0x01, 0x1F: 0x10, 0x21: 0x10}
    for d, pin in pins.items():
        table[d + 256] = pin
    return tuple(table)


LEGAL_SPAN_TAB = _span_table()
KNIGHT_PIN_TAB = _knight_pin_table()


def in_board(pos: int) -> bool:
    """Tell whether ``pos`` is a square of the playing area."""
    return 0 <= pos < 256 and BOARD_MASK[pos]


def in_fort(pos: int) -> bool:
    """Tell whether ``pos`` lies inside either palace."""
    return 0 <= pos < 256 and FORT_MASK[pos]


def square_forward(pos: int, side: int) -> int:
    """Return the square one step ahead for ``side`` (red moves up)."""
    return pos - 0x10 + (side << 5)


def square_backward(pos: int, side: int) -> int:
    """Return the square one step behind for ``side``."""
    return pos + 0x10 - (side << 5)


def same_half(pos1: int, pos2: int) -> bool:
    """Tell whether two squares are on the same side of the river."""
    return ((pos1 ^ pos2) & 0x80) == 0


def king_span(src: int, dst: int) -> bool:
    """Tell whether ``src`` to ``dst`` is a one-step orthogonal move."""
    return LEGAL_SPAN_TAB[src - dst + 256] == _SPAN_KING


def advisor_span(src: int, dst: int) -> bool:
    """Tell whether ``src`` to ``dst`` is a one-step diagonal move."""
    return LEGAL_SPAN_TAB[src - dst + 256] == _SPAN_ADVISOR


def bishop_span(src: int, dst: int) -> bool:
    """Tell whether ``src`` to ``dst`` is a two-step diagonal move."""
    return LEGAL_SPAN_TAB[src - dst + 256] == _SPAN_BISHOP


def bishop_pin(src: int, dst: int) -> int:
    """Return the square that blocks a bishop moving from ``src`` to ``dst``."""
    return (src + dst) >> 1


def knight_pin(src: int, dst: int) -> int:
    """Return the square blocking a knight move, or ``src`` if not a knight move."""
    return src + KNIGHT_PIN_TAB[dst - src + 256]


def coord_xy(r: int, c: int) -> int:
    """Combine an array row and column into a square."""
    return (r * 16 + c) & 0xFF


def to_row(row: int) -> int:
    """Turn a board row counted from the top into an array row."""
    return (row + ROW_TOP) & 0xFF


def to_col(col: int) -> int:
    """Turn a board column counted from the left into an array column."""
    return (col + COL_LEFT) & 0xFF


def coord_pc(r: int, c: int) -> int:
    """Return the square of board row ``r`` and board column ``c``."""
    return coord_xy(to_row(r), to_col(c))


def get_row(pos: int) -> int:
    """Return the array row of a square."""
    return pos >> 4


def get_col(pos: int) -> int:
    """Return the array column of a square."""
    return pos & 0x0F


def get_rel_row(pos: int) -> int:
    """Return the board row (0 at the top) of a square."""
    return get_row(pos) - ROW_TOP


def get_rel_col(pos: int) -> int:
    """Return the board column (0 at the left) of a square."""
    return get_col(pos) - COL_LEFT


Pair = tuple[Optional[int], Optional[int]]


@dataclass(frozen=True)
class RookCannonMove:
    """Reach along one line from a square, as array rows or columns.

    Index 0 is towards the start of the line (left or up), index 1 the other
    way.  ``non_cap`` is the farthest empty square, ``rook_cap`` the first
    occupied square and ``cannon_cap`` the first occupied square beyond it;
    ``None`` where there is none.
    """

    non_cap: Pair = (None, None)
    rook_cap: Pair = (None, None)
    cannon_cap: Pair = (None, None)


@dataclass(frozen=True)
class RookCannonMoveMask:
    """The same reach as bit masks over array rows or columns."""

    non_cap: int = 0
    rook_cap: int = 0
    cannon_cap: int = 0


@dataclass(frozen=True)
class LeaperMove:
    """Target squares of a blockable leaper and the square that blocks each."""

    targets: tuple[int, ...] = ()
    pins: tuple[int, ...] = ()

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(zip(self.targets, self.pins))

    def __len__(self) -> int:
        return len(self.targets)


def _scan_line(
    index: int, occupancy: int, length: int, to_abs: Callable[[int], int]
) -> tuple[RookCannonMove, RookCannonMoveMask]:
    non_cap: list[Optional[int]] = [None, None]
    rook_cap: list[Optional[int]] = [None, None]
    cannon_cap: list[Optional[int]] = [None, None]
    non_mask = rook_mask = cannon_mask = 0
    directions = (range(index - 1, -1, -1), range(index + 1, length))
    for way, steps in enumerate(directions):
        screened = False
        for k in steps:
            occupied = (occupancy >> k) & 1
            square = to_abs(k)
            if not screened:
                if occupied:
                    rook_cap[way] = square
                    rook_mask |= 1 << square
                    screened = True
                else:
                    non_cap[way] = square
                    non_mask |= 1 << square
            elif occupied:
                cannon_cap[way] = square
                cannon_mask |= 1 << square
                break
    return (
        RookCannonMove(tuple(non_cap), tuple(rook_cap), tuple(cannon_cap)),
        RookCannonMoveMask(non_mask, rook_mask, cannon_mask),
    )


def _line_tables(length: int, to_abs: Callable[[int], int]):
    lines = [
        [_scan_line(i, occ, length, to_abs) for occ in range(1 << length)]
        for i in range(length)
    ]
    moves = tuple(tuple(move for move, _ in line) for line in lines)
    masks = tuple(tuple(mask for _, mask in line) for line in lines)
    return moves, masks


def _leaper(src: int, displacements, allowed, pin) -> LeaperMove:
    if not in_board(src):
        return LeaperMove()
    targets = tuple(src + d for d in displacements if allowed(src, src + d))
    return LeaperMove(targets, tuple(pin(src, t) for t in targets))


def _steps(src: int, displacements, allowed) -> tuple[int, ...]:
    if not in_board(src):
        return ()
    return tuple(src + d for d in displacements if allowed(src + d))


def _pawn_targets(src: int, side: int) -> tuple[int, ...]:
    if not in_board(src):
        return ()
    targets = []
    forward = square_forward(src, side)
    if in_board(forward):
        targets.append(forward)
    if not same_half(src, (1 - side) << 7):
        targets.extend(t for t in (src - 1, src + 1) if in_board(t))
    return tuple(targets)


class PreGen:
    """Zobrist keys and move tables shared by every position.

    The line tables are indexed ``[index][occupancy]``: ``index`` is the
    board column (rows table) or board row (columns table) of the moving
    piece, and bit ``k`` of ``occupancy`` is set when board column or row
    ``k`` of that line is occupied.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        rng = rng if rng is not None else random.Random()
        self.zobri_table: tuple[tuple[ZobristKey, ...], ...] = tuple(
            tuple(random_key(rng) for _ in range(256)) for _ in range(14)
        )
        self.zobri_player: ZobristKey = random_key(rng)

        self.piece_mask_row = tuple(1 << get_row(p) if in_board(p) else 0 for p in range(256))
        self.piece_mask_col = tuple(1 << get_col(p) if in_board(p) else 0 for p in range(256))

        self.rook_cannon_move_row, self.rook_cannon_mask_row = _line_tables(COLS, to_col)
        self.rook_cannon_move_col, self.rook_cannon_mask_col = _line_tables(ROWS, to_row)

        self.knight_moves = tuple(
            _leaper(p, KNIGHT_DISPLACEMENTS, lambda s, t: in_board(t), knight_pin)
            for p in range(256)
        )
        self.bishop_moves = tuple(
            _leaper(
                p,
                BISHOP_DISPLACEMENTS,
                lambda s, t: in_board(t) and same_half(s, t),
                bishop_pin,
            )
            for p in range(256)
        )
        self.advisor_moves = tuple(_steps(p, ADVISOR_DISPLACEMENTS, in_fort) for p in range(256))
        self.king_moves = tuple(_steps(p, KING_DISPLACEMENTS, in_fort) for p in range(256))
        self.pawn_moves = tuple(
            (_pawn_targets(p, 0), _pawn_targets(p, 1)) for p in range(256)
        )


@functools.lru_cache(maxsize=None)
def get_pregen() -> PreGen:
    """Return the process-wide tables, building them on first use."""
    return PreGen()