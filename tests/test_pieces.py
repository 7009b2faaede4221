import pytest

from xqengine.pieces import (
    ADVISOR,
    BLACK,
    CANNON,
    FEN_PIECES,
    KING,
    KING_FROM,
    PAWN,
    PAWN_FROM,
    PAWN_TO,
    RED,
    ROOK_FROM,
    away_half,
    fen_piece,
    opp_side,
    piece_index,
    piece_side,
    piece_type,
    piece_type_side,
    same_side,
    side_tag,
    to_fen_piece,
)


def test_side_tags():
    assert side_tag(RED) == 16
    assert side_tag(BLACK) == 32


def test_opp_side_is_involution():
    for side in (RED, BLACK):
        assert opp_side(opp_side(side)) == side
        assert opp_side(side) != side


def test_piece_types_follow_slots():
    red = side_tag(RED)
    assert piece_type(red + KING_FROM) == KING
    assert piece_type(red + 1) == ADVISOR
    assert piece_type(red + 10) == CANNON
    assert [piece_type(red + i) for i in range(PAWN_FROM, PAWN_TO + 1)] == [PAWN] * 5


def test_black_and_red_share_types():
    for i in range(16):
        assert piece_type(side_tag(RED) + i) == piece_type(side_tag(BLACK) + i)


def test_piece_type_side_offsets_black():
    for i in range(16):
        red_pc, black_pc = side_tag(RED) + i, side_tag(BLACK) + i
        assert piece_type_side(red_pc) == piece_type(red_pc)
        assert piece_type_side(black_pc) == piece_type(black_pc) + 7


def test_piece_side_and_same_side():
    for i in range(16):
        assert piece_side(side_tag(RED) + i) == RED
        assert piece_side(side_tag(BLACK) + i) == BLACK
    assert same_side(side_tag(RED), side_tag(RED) + 15)
    assert not same_side(side_tag(RED), side_tag(BLACK))


def test_piece_index_strips_side():
    assert piece_index(side_tag(BLACK) + ROOK_FROM) == ROOK_FROM
    assert piece_index(side_tag(RED) + PAWN_TO) == PAWN_TO


@pytest.mark.parametrize("pc", [-1, 50, 100])
def test_piece_type_rejects_out_of_range(pc):
    with pytest.raises(ValueError):
        piece_type(pc)


def test_fen_letters_round_trip():
    for letter in FEN_PIECES:
        assert FEN_PIECES[fen_piece(letter)] == letter
        assert fen_piece(letter.lower()) == fen_piece(letter)


def test_to_fen_piece_matches_fen_piece():
    for i in range(16):
        pc = side_tag(RED) + i
        assert fen_piece(to_fen_piece(pc)) == piece_type(pc)


@pytest.mark.parametrize("bad", ["x", "", "KA", "1"])
def test_fen_piece_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        fen_piece(bad)


def test_away_half_splits_board_at_river():
    top, bottom = 0x33, 0xC3
    assert away_half(top, RED)
    assert not away_half(bottom, RED)
    assert away_half(bottom, BLACK)
    assert not away_half(top, BLACK)