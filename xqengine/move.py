"""A packed 32-bit move: source, destination, captured piece and a spare byte."""

from __future__ import annotations

from dataclasses import dataclass


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte, got {value!r}")


@dataclass
class Move:
    """A move whose four bytes are, from low to high, src, dst, capture, chkchs.

    The two high bytes also read as a signed 16-bit ordering score, ``mvlva``.
    """

    src: int = 0
    dst: int = 0
    capture: int = 0
    chkchs: int = 0

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        for name in ("src", "dst", "capture", "chkchs"):
            _check_byte(name, getattr(self, name))

    @property
    def mvlva(self) -> int:
        """The signed 16-bit score stored in the two high bytes."""
        raw = self.capture | (self.chkchs << 8)
        return raw - 0x10000 if raw & 0x8000 else raw

    @mvlva.setter
    def mvlva(self, value: int) -> None:
        if not -0x8000 <= value <= 0x7FFF:
            raise ValueError(f"mvlva must fit in a signed 16-bit word, got {value!r}")
        raw = value & 0xFFFF
        self.capture = raw & 0xFF
        self.chkchs = raw >> 8

    @property
    def mv(self) -> int:
        """The 16-bit source/destination part of the move."""
        return self.src | (self.dst << 8)

    def encode(self) -> int:
        """Pack the move into an unsigned 32-bit integer."""
        self._validate()
        return self.src | (self.dst << 8) | (self.capture << 16) | (self.chkchs << 24)

    @classmethod
    def from_int(cls, value: int) -> Move:
        """Unpack a move from an unsigned 32-bit integer."""
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"move must fit in 32 bits, got {value!r}")
        return cls(value & 0xFF, (value >> 8) & 0xFF, (value >> 16) & 0xFF, value >> 24)