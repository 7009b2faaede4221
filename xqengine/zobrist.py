"""Zobrist hash keys and the random numbers that fill them."""

from __future__ import annotations

import random
from dataclasses import dataclass, fields

_MASK32 = 0xFFFFFFFF


@dataclass(frozen=True)
class ZobristKey:
    """A three-part 32-bit Zobrist key: one primary and two secondary words."""

    pri: int = 0
    sec0: int = 0
    sec1: int = 0

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if not 0 <= value <= _MASK32:
                raise ValueError(f"{field.name} must fit in 32 bits, got {value!r}")

    def xor(self, other: ZobristKey) -> ZobristKey:
        """Return the word-wise exclusive or of this key and ``other``."""
        return ZobristKey(self.pri ^ other.pri, self.sec0 ^ other.sec0, self.sec1 ^ other.sec1)

    __xor__ = xor


def rand31(rng: random.Random) -> int:
    """Draw a uniformly distributed integer in ``[0, 2**31)``."""
    return rng.randrange(1 << 31)


def random_key(rng: random.Random) -> ZobristKey:
    """Build a key whose three words are drawn with :func:`rand31`."""
    return ZobristKey(rand31(rng), rand31(rng), rand31(rng))