"""A board position with bit boards, Zobrist hashing and move history."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Optional, Union

from .move import Move
from .movegen import MoveGenerator
from .pieces import (
    ADVISOR_FROM,
    ADVISOR_TO,
    BISHOP_FROM,
    BISHOP_TO,
    BLACK,
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
    away_half,
    fen_piece,
    opp_side,
    piece_index,
    piece_side,
    piece_type_side,
    same_side,
    side_tag,
    to_fen_piece,
)
from .pregen import (
    COLS,
    ROWS,
    RookCannonMove,
    RookCannonMoveMask,
    advisor_span,
    bishop_pin,
    bishop_span,
    coord_pc,
    get_col,
    get_rel_col,
    get_rel_row,
    get_row,
    in_board,
    in_fort,
    king_span,
    knight_pin,
    square_backward,
    square_forward,
)
from .zobrist import ZobristKey

# First and last slot of each piece type, in FEN letter order (K A B N R C P).
_SLOTS = (
    (KING_FROM, KING_FROM),
    (ADVISOR_FROM, ADVISOR_TO),
    (BISHOP_FROM, BISHOP_TO),
    (KNIGHT_FROM, KNIGHT_TO),
    (ROOK_FROM, ROOK_TO),
    (CANNON_FROM, CANNON_TO),
    (PAWN_FROM, PAWN_TO),
)

MoveLike = Union[int, Move]


class IllegalMoveError(ValueError):
    """Raised when a move cannot be played on the current position."""


@dataclass
class Trace:
    """One history entry: the key before a move and the move itself."""

    zobri: ZobristKey
    move: Optional[Move] = None


def _as_move(mv: MoveLike) -> Move:
    return Move.from_int(mv) if isinstance(mv, int) else replace(mv)


class Position(MoveGenerator):
    """A position: board, piece squares, line occupancy, hash key and side to move."""

    def __init__(self) -> None:
        super().__init__()
        self.reset()

    def reset(self) -> None:
        """Empty the board and forget the history; red is to move."""
        self.board = [0] * 256
        self.pieces = [0] * 50
        self.bit_row = [0] * ROWS
        self.bit_col = [0] * COLS
        self.zobri = ZobristKey()
        self.side = RED
        self.trace: list[Trace] = []

    # FEN.

    def from_fen(self, fen: str) -> None:
        """Set up the board from a FEN placement, optionally followed by ``r`` or ``b``."""
        fields = fen.split()
        if not fields:
            raise ValueError("empty FEN")
        placement = fields[0]
        if placement.endswith("/"):
            placement = placement[:-1]
        rows = placement.split("/")
        if len(rows) != ROWS:
            raise ValueError(f"FEN needs {ROWS} rows, got {len(rows)}")
        self.reset()
        try:
            self._place_rows(rows)
            if len(fields) > 1:
                token = fields[1]
                if token == "b":
                    self.change_side()
                elif token not in ("r", "w"):
                    raise ValueError(f"unknown side to move: {token!r}")
        except ValueError:
            self.reset()
            raise

    def _place_rows(self, rows: list[str]) -> None:
        next_slot = {RED: [first for first, _ in _SLOTS], BLACK: [first for first, _ in _SLOTS]}
        for r, text in enumerate(rows):
            c = 0
            for ch in text:
                if ch in "0123456789":
                    c += int(ch)
                    continue
                if not (ch.isascii() and ch.isalpha()):
                    raise ValueError(f"unexpected FEN character: {ch!r}")
                side = RED if ch.isupper() else BLACK
                kind = fen_piece(ch)
                slot = next_slot[side][kind]
                if slot > _SLOTS[kind][1]:
                    raise ValueError(f"too many pieces of kind {ch!r}")
                if c >= COLS:
                    raise ValueError(f"FEN row {r} is wider than {COLS} columns")
                self.add_piece(coord_pc(r, c), side_tag(side) + slot)
                next_slot[side][kind] += 1
                c += 1
            if c > COLS:
                raise ValueError(f"FEN row {r} is wider than {COLS} columns")

    def to_fen(self) -> str:
        """Return the FEN placement of the board."""
        rows = []
        for r in range(ROWS):
            parts = []
            empty = 0
            for c in range(COLS):
                pc = self.board[coord_pc(r, c)]
                if not pc:
                    empty += 1
                    continue
                if empty:
                    parts.append(str(empty))
                    empty = 0
                letter = to_fen_piece(pc)
                parts.append(letter if piece_side(pc) == RED else letter.lower())
            if empty:
                parts.append(str(empty))
            rows.append("".join(parts))
        return "/".join(rows)

    # Line tables looked up through the bit boards.

    def horizon_mask(self, pos: int) -> RookCannonMoveMask:
        """Return the reach masks along the row of ``pos``."""
        return self.pregen.rook_cannon_mask_row[get_rel_col(pos)][self.bit_row[get_rel_row(pos)]]

    def vertic_mask(self, pos: int) -> RookCannonMoveMask:
        """Return the reach masks along the column of ``pos``."""
        return self.pregen.rook_cannon_mask_col[get_rel_row(pos)][self.bit_col[get_rel_col(pos)]]

    def horizon_move(self, pos: int) -> RookCannonMove:
        """Return the reach squares along the row of ``pos``."""
        return self.pregen.rook_cannon_move_row[get_rel_col(pos)][self.bit_row[get_rel_row(pos)]]

    def vertic_move(self, pos: int) -> RookCannonMove:
        """Return the reach squares along the column of ``pos``."""
        return self.pregen.rook_cannon_move_col[get_rel_row(pos)][self.bit_col[get_rel_col(pos)]]

    def _horizon_move(self, pos: int) -> RookCannonMove:
        return self.horizon_move(pos)

    def _vertic_move(self, pos: int) -> RookCannonMove:
        return self.vertic_move(pos)

    def _protected_by(self, side: int, dst: int) -> int:
        return self.protected_by(side, dst)

    def _toggle(self, pos: int) -> None:
        r, c = get_rel_row(pos), get_rel_col(pos)
        self.bit_row[r] ^= 1 << c
        self.bit_col[c] ^= 1 << r

    # Placing and moving pieces.

    def add_piece(self, pos: int, pc: int) -> None:
        """Put piece ``pc`` on the empty square ``pos``."""
        if not in_board(pos):
            raise ValueError(f"square off the board: {pos!r}")
        if not side_tag(RED) <= pc < side_tag(BLACK) + 16:
            raise ValueError(f"piece code out of range: {pc!r}")
        if self.board[pos]:
            raise ValueError(f"square {pos:#04x} is occupied")
        if self.pieces[pc]:
            raise ValueError(f"piece {pc} is already on the board")
        self.board[pos] = pc
        self.pieces[pc] = pos
        self._toggle(pos)
        self.zobri ^= self.pregen.zobri_table[piece_type_side(pc)][pos]

    def del_piece(self, pos: int) -> int:
        """Remove the piece on ``pos`` and return its code."""
        pc = self.board[pos] if 0 <= pos < 256 else 0
        if not pc:
            raise ValueError(f"no piece on square {pos!r}")
        self.pieces[pc] = 0
        self.board[pos] = 0
        self._toggle(pos)
        self.zobri ^= self.pregen.zobri_table[piece_type_side(pc)][pos]
        return pc

    def move_piece(self, move: Move) -> int:
        """Move a piece, record the captured piece in ``move`` and return it."""
        src, dst = move.src, move.dst
        moved = self.board[src]
        if not moved:
            raise IllegalMoveError(f"no piece on square {src:#04x}")
        captured = self.board[dst]
        table = self.pregen.zobri_table
        self.board[src] = 0
        self.board[dst] = moved
        self.pieces[moved] = dst
        self._toggle(src)
        if captured:
            self.pieces[captured] = 0
            self.zobri ^= table[piece_type_side(captured)][dst]
        else:
            self._toggle(dst)
        move.capture = captured
        pt = piece_type_side(moved)
        self.zobri ^= table[pt][src]
        self.zobri ^= table[pt][dst]
        return captured

    def undo_move_piece(self, move: Move) -> None:
        """Put the pieces of ``move`` back; the hash key is restored by :meth:`rollback`."""
        src, dst = move.src, move.dst
        moved = self.board[dst]
        if not moved:
            raise ValueError(f"no piece on square {dst:#04x} to take back")
        self.board[src] = moved
        self.pieces[moved] = src
        self._toggle(src)
        if move.capture:
            self.board[dst] = move.capture
            self.pieces[move.capture] = dst
        else:
            self.board[dst] = 0
            self._toggle(dst)

    def make_move(self, mv: MoveLike) -> Move:
        """Play a move for the side to move and return it with its capture filled in."""
        move = _as_move(mv)
        if not (in_board(move.src) and in_board(move.dst)):
            raise IllegalMoveError("move leaves the board")
        moved = self.board[move.src]
        if not moved:
            raise IllegalMoveError(f"no piece on square {move.src:#04x}")
        target = self.board[move.dst]
        if target and same_side(moved, target):
            raise IllegalMoveError("cannot capture a piece of the same side")
        self.save_status()
        self.move_piece(move)
        if self.checked_by():
            self.undo_move_piece(move)
            self.rollback()
            raise IllegalMoveError("move leaves the king in check")
        self.change_side()
        self.trace[-1].move = move
        return move

    def undo_make_move(self) -> Move:
        """Take back the last move and return it."""
        if not self.trace or self.trace[-1].move is None:
            raise IndexError("no move to undo")
        move = self.trace[-1].move
        self.undo_move_piece(move)
        self.side = opp_side(self.side)
        self.rollback()
        return move

    # Rules.

    def legal_move(self, move: MoveLike) -> bool:
        """Tell whether ``move`` follows the movement rule of the piece it moves."""
        move = _as_move(move)
        src, dst = move.src, move.dst
        if not (in_board(src) and in_board(dst)):
            return False
        moved = self.board[src]
        if not moved:
            return False
        captured = self.board[dst]
        if captured and same_side(moved, captured):
            return False
        index = piece_index(moved)
        if index == KING_FROM:
            return in_fort(dst) and king_span(src, dst)
        if ADVISOR_FROM <= index <= ADVISOR_TO:
            return in_fort(dst) and advisor_span(src, dst)
        if BISHOP_FROM <= index <= BISHOP_TO:
            return (
                not ((src ^ dst) & 0x80)
                and bishop_span(src, dst)
                and self.board[bishop_pin(src, dst)] == 0
            )
        if KNIGHT_FROM <= index <= KNIGHT_TO:
            pin = knight_pin(src, dst)
            return pin != src and self.board[pin] == 0
        if ROOK_FROM <= index <= CANNON_TO:
            if get_row(src) == get_row(dst):
                mask, bit = self.horizon_mask(src), self.pregen.piece_mask_col[dst]
            elif get_col(src) == get_col(dst):
                mask, bit = self.vertic_mask(src), self.pregen.piece_mask_row[dst]
            else:
                return False
            if not captured:
                reach = mask.non_cap
            elif index <= ROOK_TO:
                reach = mask.rook_cap
            else:
                reach = mask.cannon_cap
            return (reach & bit) != 0
        side = piece_side(moved)
        if away_half(dst, side) and dst in (src - 1, src + 1):
            return True
        return square_forward(src, side) == dst

    def gen_all_moves(self) -> list[int]:
        """Return every capturing then every quiet move of the side to move."""
        return self.gen_cap_moves() + self.gen_non_cap_moves()

    # History.

    def save_status(self) -> None:
        """Push the current hash key onto the history."""
        self.trace.append(Trace(self.zobri))

    def rollback(self) -> None:
        """Pop the history and restore the hash key saved there."""
        if not self.trace:
            raise IndexError("history is empty")
        self.zobri = self.trace.pop().zobri

    def change_side(self) -> None:
        """Hand the move to the other side."""
        self.side = opp_side(self.side)
        self.zobri ^= self.pregen.zobri_player

    # Attacks.

    def _placed(self, side: int, first: int, last: int) -> Iterator[tuple[int, int]]:
        tag = side_tag(side)
        for pc in range(tag + first, tag + last + 1):
            pos = self.pieces[pc]
            if pos:
                yield pc, pos

    def _line_attacker(self, side: int, dst: int, first: int, last: int, cannon: bool) -> int:
        horizon, vertic = self.horizon_mask(dst), self.vertic_mask(dst)
        for pc, pos in self._placed(side, first, last):
            if pos == dst:
                continue
            if get_row(pos) == get_row(dst):
                reach = horizon.cannon_cap if cannon else horizon.rook_cap
                if reach & self.pregen.piece_mask_col[pos]:
                    return pc
            elif get_col(pos) == get_col(dst):
                reach = vertic.cannon_cap if cannon else vertic.rook_cap
                if reach & self.pregen.piece_mask_row[pos]:
                    return pc
        return 0

    def _knight_attacker(self, side: int, dst: int) -> int:
        for pc, pos in self._placed(side, KNIGHT_FROM, KNIGHT_TO):
            pin = knight_pin(pos, dst)
            if pin != pos and self.board[pin] == 0:
                return pc
        return 0

    def _is_pawn_of(self, pc: int, side: int) -> bool:
        return pc != 0 and piece_side(pc) == side and piece_index(pc) >= PAWN_FROM

    def checked_by(self) -> int:
        """Return the code of a piece giving check to the side to move, or 0."""
        king_pos = self.pieces[side_tag(self.side)]
        if not king_pos:
            return 0
        opp = opp_side(self.side)
        attacker = (
            self._line_attacker(opp, king_pos, ROOK_FROM, ROOK_TO, cannon=False)
            or self._line_attacker(opp, king_pos, CANNON_FROM, CANNON_TO, cannon=True)
            or self._knight_attacker(opp, king_pos)
        )
        if attacker:
            return attacker
        opp_king = side_tag(opp) + KING_FROM
        opp_king_pos = self.pieces[opp_king]
        if (
            opp_king_pos
            and get_col(opp_king_pos) == get_col(king_pos)
            and self.vertic_mask(king_pos).rook_cap & self.pregen.piece_mask_row[opp_king_pos]
        ):
            return opp_king
        for pos in (king_pos - 1, king_pos + 1, square_forward(king_pos, self.side)):
            pc = self.board[pos]
            if self._is_pawn_of(pc, opp):
                return pc
        return 0

    def protected_by(self, side: int, dst: int) -> int:
        """Return the code of a piece of ``side`` that defends ``dst``, or 0."""
        if not away_half(dst, side):
            if in_fort(dst):
                for pc, pos in self._placed(side, KING_FROM, KING_FROM):
                    if king_span(pos, dst):
                        return pc
                for pc, pos in self._placed(side, ADVISOR_FROM, ADVISOR_TO):
                    if advisor_span(pos, dst):
                        return pc
            for pc, pos in self._placed(side, BISHOP_FROM, BISHOP_TO):
                if bishop_span(pos, dst) and self.board[bishop_pin(pos, dst)] == 0:
                    return pc
            candidates: tuple[int, ...] = (square_backward(dst, side),)
        else:
            candidates = (dst - 1, dst + 1, square_backward(dst, side))
        for pos in candidates:
            pc = self.board[pos]
            if self._is_pawn_of(pc, side):
                return pc
        return (
            self._line_attacker(side, dst, ROOK_FROM, ROOK_TO, cannon=False)
            or self._line_attacker(side, dst, CANNON_FROM, CANNON_TO, cannon=True)
            or self._knight_attacker(side, dst)
        )