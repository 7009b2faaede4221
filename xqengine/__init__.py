"""Xiangqi position model, FEN, move generation and a UCCI-style TCP command server."""

__version__ = "0.1.0"