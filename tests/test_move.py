import pytest

from xqengine.move import Move


def test_byte_layout():
    move = Move(src=0x33, dst=0x44)
    assert move.encode() == 0x4433
    assert move.mv == 0x4433


def test_round_trip_through_int():
    move = Move(src=0x56, dst=0x67, capture=40, chkchs=2)
    assert Move.from_int(move.encode()) == move


def test_from_int_splits_bytes():
    move = Move.from_int(0x04030201)
    assert (move.src, move.dst, move.capture, move.chkchs) == (1, 2, 3, 4)


def test_mvlva_negative_round_trip():
    move = Move(src=0x33, dst=0x34)
    move.mvlva = -5
    assert move.mvlva == -5
    assert Move.from_int(move.encode()).mvlva == -5


def test_mvlva_shares_bytes_with_capture():
    move = Move(src=1, dst=2, capture=7, chkchs=0)
    assert move.mvlva == 7
    move.mvlva = 300
    assert move.capture | (move.chkchs << 8) == 300


def test_mvlva_limits():
    move = Move()
    move.mvlva = 32767
    assert move.mvlva == 32767
    move.mvlva = -32768
    assert move.mvlva == -32768


def test_mvlva_out_of_range():
    move = Move()
    move.mvlva = 12
    with pytest.raises(ValueError):
        move.mvlva = 40000
    assert move.mvlva == 12


@pytest.mark.parametrize("value", [-1, 2**32])
def test_from_int_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        Move.from_int(value)


def test_constructor_rejects_wide_bytes():
    with pytest.raises(ValueError):
        Move(src=256)


def test_encode_rejects_later_corruption():
    move = Move(1, 2)
    move.dst = 999
    with pytest.raises(ValueError):
        move.encode()