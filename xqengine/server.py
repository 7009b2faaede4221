"""A TCP server that answers engine commands for a board client.

Every packet, in both directions, is an 8-byte little-endian signed length
followed by that many bytes of UTF-8 text.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import struct
from typing import Optional, Sequence

from .position import IllegalMoveError, Position
from .ucci import UcciParser, UcciType, to_ucci_coord

log = logging.getLogger(__name__)

_HEADER = struct.Struct("<q")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9999


def encode_packet(text: str) -> bytes:
    """Frame ``text`` for the wire; empty text gives no packet at all."""
    data = text.encode("utf-8")
    if not data:
        return b""
    return _HEADER.pack(len(data)) + data


class _PacketBuffer:
    """Collects bytes and splits them into complete text packets."""

    def __init__(self) -> None:
        self._data = bytearray()

    def feed(self, data: bytes) -> list[str]:
        self._data.extend(data)
        packets = []
        while len(self._data) >= _HEADER.size:
            (length,) = _HEADER.unpack_from(self._data)
            if length < 0:
                self._data.clear()
                raise ValueError(f"negative packet length: {length}")
            end = _HEADER.size + length
            if len(self._data) < end:
                break
            payload = bytes(self._data[_HEADER.size:end])
            del self._data[:end]
            packets.append(payload.decode("utf-8"))
        return packets


class EngineServer:
    """Holds one position and answers the commands sent to it."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        self.host = host
        self.port = port
        self.position = Position()
        self.parser = UcciParser()
        self._buffer = _PacketBuffer()

    def handle_cmd(self, cmd: str) -> str:
        """Carry out one command and return the reply, or ``""`` when there is none."""
        log.debug("recv: %s", cmd)
        command = self.parser.process_command(cmd)
        kind = command.kind
        if kind == UcciType.UCCI:
            return "ucci fighting!!!"
        if kind == UcciType.ISREADY:
            return "isready ready"
        if kind == UcciType.QUIT:
            return "quit"
        if kind == UcciType.GETPOS:
            return "getpos " + self.position.to_fen()
        if kind == UcciType.POSITION:
            self._build_position(command.fen or "", command.side, command.moves)
            return ""
        if kind == UcciType.GETMV:
            try:
                moves = self.position.gen_piece_moves(command.square)
            except ValueError:
                moves = []
            return "getmv " + "".join(to_ucci_coord(mv) + " " for mv in moves)
        if kind == UcciType.MAKEMV:
            try:
                self.position.make_move(command.moves[0])
            except IllegalMoveError:
                return "makemv illegal"
            return "makemv ok"
        return ""

    def _build_position(self, fen: str, side: int, moves: Sequence[int]) -> None:
        self.position.from_fen(f"{fen} {'b' if side else 'r'}")
        for mv in moves:
            try:
                self.position.make_move(mv)
            except IllegalMoveError as exc:
                log.warning("skipping move %s: %s", to_ucci_coord(mv), exc)

    def feed(self, data: bytes) -> list[str]:
        """Take raw bytes, run every complete command and return the non-empty replies."""
        replies = []
        for text in self._buffer.feed(data):
            reply = self.handle_cmd(text)
            if reply:
                replies.append(reply)
        return replies

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        log.info("[%s] socket connected", peer)
        packets = _PacketBuffer()
        try:
            while data := await reader.read(4096):
                for text in packets.feed(data):
                    try:
                        reply = self.handle_cmd(text)
                    except ValueError as exc:
                        log.warning("[%s] bad command %r: %s", peer, text, exc)
                        continue
                    if reply:
                        writer.write(encode_packet(reply))
                        await writer.drain()
                    if reply == "quit":
                        return
        except (ValueError, ConnectionError) as exc:
            log.warning("[%s] socket error: %s", peer, exc)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass
            log.info("[%s] socket disconnected", peer)

    async def _run(self) -> None:
        host = None if self.host == "Any" else self.host
        server = await asyncio.start_server(self._handle_client, host, self.port)
        log.info("server started on %s:%s", self.host, self.port)
        async with server:
            await server.serve_forever()

    def serve(self) -> None:
        """Listen on the configured address and answer clients until stopped."""
        asyncio.run(self._run())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the engine server from the command line."""
    parser = argparse.ArgumentParser(description="Serve engine commands over TCP.")
    parser.add_argument("--host", default=DEFAULT_HOST, help='address to bind, or "Any"')
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every command")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        EngineServer(args.host, args.port).serve()
    except KeyboardInterrupt:
        log.info("server stopped")
    return 0