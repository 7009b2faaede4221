"""Move generation over a 256-square array board.

Moves come back as packed 32-bit integers (see :class:`xqengine.move.Move`).
Moves from the side-wide generators carry an ordering score in ``mvlva``.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Sequence

from .move import Move
from .pieces import (
    ADVISOR_FROM,
    ADVISOR_TO,
    BISHOP_FROM,
    BISHOP_TO,
    CANNON_FROM,
    CANNON_TO,
    KING_FROM,
    KNIGHT_FROM,
    KNIGHT_TO,
    PAWN_FROM,
    PAWN_TO,
    RED,
    ROOK_FROM,
    ROOK_TO,
    opp_side,
    piece_index,
    piece_side,
    piece_type,
    same_side,
    side_tag,
)
from .pregen import (
    COLS,
    ROWS,
    PreGen,
    RookCannonMove,
    coord_xy,
    get_col,
    get_pregen,
    get_rel_col,
    get_rel_row,
    get_row,
    to_col,
    to_row,
)

SIMPLE_VALUE = (5, 1, 2, 3, 4, 3, 1)

_LVA_KING = 5
_LVA_ADVISOR = 1
_LVA_BISHOP = 2
_LVA_KNIGHT = 3
_LVA_CANNON = 3
_LVA_ROOK = 4
_LVA_PAWN = 1

Protector = Callable[[int, int], int]


def _encode(src: int, dst: int, score: Optional[int] = None) -> int:
    move = Move(src, dst)
    if score is not None:
        move.mvlva = score
    return move.encode()


class MoveGenerator:
    """Generates pseudo-legal moves for the pieces on a board.

    ``board`` maps each of the 256 squares to a piece code (0 for empty);
    ``pieces`` maps each piece code to its square (0 when off the board) and
    is derived from ``board`` when not given.  ``protector`` answers
    ``(side, square)`` with a nonzero value when ``side`` defends ``square``;
    without one no square counts as defended.
    """

    def __init__(
        self,
        board: Optional[Sequence[int]] = None,
        pieces: Optional[Sequence[int]] = None,
        side: int = RED,
        pregen: Optional[PreGen] = None,
        protector: Optional[Protector] = None,
    ) -> None:
        self.pregen = pregen if pregen is not None else get_pregen()
        self.board = list(board) if board is not None else [0] * 256
        if len(self.board) != 256:
            raise ValueError(f"board must have 256 squares, got {len(self.board)}")
        if pieces is None:
            derived = [0] * 50
            for pos, pc in enumerate(self.board):
                if pc:
                    derived[pc] = pos
            pieces = derived
        self.pieces = list(pieces)
        if len(self.pieces) != 50:
            raise ValueError(f"pieces must have 50 entries, got {len(self.pieces)}")
        self.side = side
        self._protector = protector

    # Hooks a position with its own bookkeeping may override.

    def _protected_by(self, side: int, dst: int) -> int:
        return self._protector(side, dst) if self._protector is not None else 0

    def _horizon_move(self, pos: int) -> RookCannonMove:
        row = get_row(pos)
        occupancy = sum(
            1 << k for k in range(COLS) if self.board[coord_xy(row, to_col(k))]
        )
        return self.pregen.rook_cannon_move_row[get_rel_col(pos)][occupancy]

    def _vertic_move(self, pos: int) -> RookCannonMove:
        col = get_col(pos)
        occupancy = sum(
            1 << k for k in range(ROWS) if self.board[coord_xy(to_row(k), col)]
        )
        return self.pregen.rook_cannon_move_col[get_rel_row(pos)][occupancy]

    # Helpers.

    def _side_pieces(self, first: int, last: int) -> Iterator[tuple[int, int]]:
        tag = side_tag(self.side)
        for pc in range(tag + first, tag + last + 1):
            pos = self.pieces[pc]
            if pos:
                yield pc, pos

    def _is_enemy(self, pc: int, target: int) -> bool:
        return target != 0 and not same_side(pc, target)

    def _step_targets(self, pc: int, src: int) -> tuple[int, ...]:
        index = piece_index(pc)
        if index == KING_FROM:
            return self.pregen.king_moves[src]
        if ADVISOR_FROM <= index <= ADVISOR_TO:
            return self.pregen.advisor_moves[src]
        return self.pregen.pawn_moves[src][piece_side(pc)]

    def _leaper_targets(self, pc: int, src: int) -> Iterator[int]:
        index = piece_index(pc)
        table = (
            self.pregen.bishop_moves
            if BISHOP_FROM <= index <= BISHOP_TO
            else self.pregen.knight_moves
        )
        for dst, pin in table[src]:
            if self.board[pin] == 0:
                yield dst

    def _line_captures(self, src: int, cannon: bool) -> Iterator[int]:
        horizon = self._horizon_move(src)
        vertic = self._vertic_move(src)
        row, col = get_row(src), get_col(src)
        h_caps = horizon.cannon_cap if cannon else horizon.rook_cap
        v_caps = vertic.cannon_cap if cannon else vertic.rook_cap
        for c in h_caps:
            if c is not None:
                yield coord_xy(row, c)
        for r in v_caps:
            if r is not None:
                yield coord_xy(r, col)

    def _line_quiet(self, src: int) -> Iterator[int]:
        horizon = self._horizon_move(src)
        vertic = self._vertic_move(src)
        row, col = get_row(src), get_col(src)
        left, right = horizon.non_cap
        up, down = vertic.non_cap
        if left is not None:
            for c in range(col - 1, left - 1, -1):
                yield coord_xy(row, c)
        if right is not None:
            for c in range(col + 1, right + 1):
                yield coord_xy(row, c)
        if up is not None:
            for r in range(row - 1, up - 1, -1):
                yield coord_xy(r, col)
        if down is not None:
            for r in range(row + 1, down + 1):
                yield coord_xy(r, col)

    def _piece_targets(self, pc: int, src: int, captures: bool) -> Iterator[int]:
        """Yield capture or quiet destinations of piece ``pc`` standing on ``src``."""
        index = piece_index(pc)
        if ROOK_FROM <= index <= CANNON_TO:
            if captures:
                cannon = index >= CANNON_FROM
                for dst in self._line_captures(src, cannon):
                    if self._is_enemy(pc, self.board[dst]):
                        yield dst
            else:
                for dst in self._line_quiet(src):
                    if self.board[dst] == 0:
                        yield dst
            return
        if BISHOP_FROM <= index <= KNIGHT_TO:
            targets: Iterator[int] = self._leaper_targets(pc, src)
        else:
            targets = iter(self._step_targets(pc, src))
        for dst in targets:
            occupant = self.board[dst]
            if captures and self._is_enemy(pc, occupant):
                yield dst
            elif not captures and occupant == 0:
                yield dst

    # Public generators.

    def mv_lva(self, dst: int, captured: int, lva: int) -> int:
        """Score a move: value of the captured piece less ``lva`` if ``dst`` is defended."""
        value = SIMPLE_VALUE[piece_type(captured)] if captured else 0
        adjust = lva if self._protected_by(opp_side(self.side), dst) > 0 else 0
        return value - adjust

    def _gen_scored(self, captures: bool, groups) -> list[int]:
        moves = []
        for first, last, lva in groups:
            for pc, src in self._side_pieces(first, last):
                for dst in self._piece_targets(pc, src, captures):
                    score = self.mv_lva(dst, self.board[dst], lva)
                    moves.append(_encode(src, dst, score))
        return moves

    def gen_cap_moves(self) -> list[int]:
        """Return the capturing moves of the side to move, scored by ``mv_lva``."""
        return self._gen_scored(
            True,
            (
                (KING_FROM, KING_FROM, _LVA_KING),
                (ADVISOR_FROM, ADVISOR_TO, _LVA_ADVISOR),
                (BISHOP_FROM, BISHOP_TO, _LVA_BISHOP),
                (KNIGHT_FROM, KNIGHT_TO, _LVA_KNIGHT),
                (CANNON_FROM, CANNON_TO, _LVA_CANNON),
                (ROOK_FROM, ROOK_TO, _LVA_ROOK),
                (PAWN_FROM, PAWN_TO, _LVA_PAWN),
            ),
        )

    def gen_non_cap_moves(self) -> list[int]:
        """Return the non-capturing moves of the side to move, scored by ``mv_lva``."""
        return self._gen_scored(
            False,
            (
                (KING_FROM, KING_FROM, _LVA_KING),
                (ADVISOR_FROM, ADVISOR_TO, _LVA_ADVISOR),
                (BISHOP_FROM, BISHOP_TO, _LVA_BISHOP),
                (KNIGHT_FROM, KNIGHT_TO, _LVA_KNIGHT),
                (ROOK_FROM, CANNON_TO, _LVA_KNIGHT),
                (PAWN_FROM, PAWN_TO, _LVA_PAWN),
            ),
        )

    def gen_piece_moves(self, pos: int) -> list[int]:
        """Return every move, capturing or not, of the piece on square ``pos``."""
        if not 0 <= pos < 256:
            raise ValueError(f"square out of range: {pos!r}")
        pc = self.board[pos]
        if pc == 0:
            raise ValueError(f"no piece on square {pos:#04x}")
        moves = [_encode(pos, dst) for dst in self._piece_targets(pc, pos, True)]
        moves.extend(_encode(pos, dst) for dst in self._piece_targets(pc, pos, False))
        return moves