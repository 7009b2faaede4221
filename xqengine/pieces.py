"""Piece numbering and the helpers that classify piece codes.

Pieces are numbered 16..31 for red and 32..47 for black.  Within a side the
low four bits give the slot: 0 king, 1-2 advisors, 3-4 bishops, 5-6 knights,
7-8 rooks, 9-10 cannons, 11-15 pawns.
"""

from __future__ import annotations

KING_FROM = 0
ADVISOR_FROM = 1
ADVISOR_TO = 2
BISHOP_FROM = 3
BISHOP_TO = 4
KNIGHT_FROM = 5
KNIGHT_TO = 6
ROOK_FROM = 7
ROOK_TO = 8
CANNON_FROM = 9
CANNON_TO = 10
PAWN_FROM = 11
PAWN_TO = 15

RED = 0
BLACK = 1

KING, ADVISOR, BISHOP, KNIGHT, ROOK, CANNON, PAWN = range(7)

_SIDE_TYPES = (
    KING,
    ADVISOR, ADVISOR,
    BISHOP, BISHOP,
    KNIGHT, KNIGHT,
    ROOK, ROOK,
    CANNON, CANNON,
    PAWN, PAWN, PAWN, PAWN, PAWN,
)

PIECE_TYPE_TABLE: tuple[int, ...] = (0,) * 16 + _SIDE_TYPES * 2 + (0,) * 2

FEN_PIECES = "KABNRCP"


def opp_side(side: int) -> int:
    """Return the other side."""
    return 1 - side


def side_tag(side: int) -> int:
    """Return the first piece code of ``side``."""
    return side * 16 + 16


def piece_type(pc: int) -> int:
    """Return the piece type (0 king .. 6 pawn) of piece code ``pc``."""
    if not 0 <= pc < len(PIECE_TYPE_TABLE):
        raise ValueError(f"piece code out of range: {pc!r}")
    return PIECE_TYPE_TABLE[pc]


def piece_type_side(pc: int) -> int:
    """Return the type with the side folded in: 0-6 red, 7-13 black."""
    pt = piece_type(pc)
    return pt + 7 if pc > 31 else pt


def piece_side(pc: int) -> int:
    """Return the side that owns piece code ``pc``."""
    return RED if pc & 0x10 else BLACK


def same_side(pc1: int, pc2: int) -> bool:
    """Tell whether two piece codes belong to the same side."""
    return ((pc1 ^ pc2) & 0x10) == 0


def piece_index(pc: int) -> int:
    """Return the slot of a piece within its side."""
    return pc & 0x0F


def away_half(pos: int, side: int) -> bool:
    """Tell whether square ``pos`` lies across the river for ``side``."""
    return (pos & 0x80) == (side << 7)


def fen_piece(char: str) -> int:
    """Return the piece type named by a FEN letter, in either case."""
    index = FEN_PIECES.find(char.upper()) if len(char) == 1 else -1
    if index < 0:
        raise ValueError(f"not a FEN piece letter: {char!r}")
    return index


def to_fen_piece(pc: int) -> str:
    """Return the upper-case FEN letter for piece code ``pc``."""
    return FEN_PIECES[piece_type(pc)]