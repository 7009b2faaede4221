import pytest

from xqengine.pregen import coord_pc
from xqengine.ucci import (
    START_FEN,
    UcciParser,
    UcciType,
    to_array_coord,
    to_ucci_coord,
)


@pytest.fixture
def parser():
    return UcciParser()


def test_to_array_coord_packs_source_low_and_destination_high():
    mv = to_array_coord("a0a1")
    assert mv & 0xFF == coord_pc(9, 0)
    assert mv >> 8 == coord_pc(8, 0)


def test_upper_case_letters_are_accepted():
    assert to_array_coord("H2E2") == to_array_coord("h2e2")


@pytest.mark.parametrize("text", ["a0a1", "h2e2", "i9a0", "e3e4", "b7b0"])
def test_round_trip(text):
    assert to_ucci_coord(to_array_coord(text)) == text


@pytest.mark.parametrize("text", ["", "a0", "z0a1", "a0ax", "a0a1a"])
def test_malformed_moves_raise(text):
    with pytest.raises(ValueError):
        to_array_coord(text)


def test_off_board_square_cannot_be_formatted():
    with pytest.raises(ValueError):
        to_ucci_coord(0)


@pytest.mark.parametrize(
    "command, kind",
    [
        ("ucci", UcciType.UCCI),
        ("isready", UcciType.ISREADY),
        ("go depth 3", UcciType.GO),
        ("stop", UcciType.STOP),
        ("quit", UcciType.QUIT),
        ("getpos", UcciType.GETPOS),
        ("hello", UcciType.POS_ERROR),
        ("", UcciType.POS_ERROR),
    ],
)
def test_simple_commands(parser, command, kind):
    assert parser.process_command(command).kind == kind


def test_position_startpos(parser):
    cmd = parser.process_command("position startpos")
    assert cmd.kind == UcciType.POSITION
    assert cmd.fen == START_FEN
    assert cmd.moves == ()
    assert cmd.side == 0


def test_position_with_fen_side_and_moves(parser):
    cmd = parser.process_command(f"position {START_FEN} b moves h2e2 h9g7")
    assert cmd.kind == UcciType.POSITION
    assert cmd.fen == START_FEN
    assert cmd.side == 1
    assert cmd.moves == (to_array_coord("h2e2"), to_array_coord("h9g7"))


def test_position_red_to_move(parser):
    assert parser.process_command(f"position {START_FEN} r").side == 0


def test_position_without_arguments_is_an_error(parser):
    assert parser.process_command("position").kind == UcciType.POS_ERROR


def test_position_with_bad_move_is_an_error(parser):
    cmd = parser.process_command(f"position {START_FEN} r moves zz99")
    assert cmd.kind == UcciType.POS_ERROR


def test_getmv_names_a_square(parser):
    cmd = parser.process_command("getmv e3")
    assert cmd.kind == UcciType.GETMV
    assert cmd.square == to_array_coord("e3e3") & 0xFF


def test_makemv_carries_one_move(parser):
    cmd = parser.process_command("makemv h2e2 ")
    assert cmd.kind == UcciType.MAKEMV
    assert cmd.moves == (to_array_coord("h2e2"),)


@pytest.mark.parametrize("command", ["makemv", "makemv q1", "getmv", "getmv x9"])
def test_malformed_arguments_are_errors(parser, command):
    assert parser.process_command(command).kind == UcciType.POS_ERROR