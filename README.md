# xqengine

A small Xiangqi (Chinese chess) engine core. It keeps the board as a 16x16
array with row and column bit boards and a Zobrist hash key. It precomputes
move tables and generates pseudo-legal moves. It reads and writes FEN
placements. It also has a TCP server that answers a simple UCCI-like command
set.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Using the library

```python
from xqengine.position import Position
from xqengine.ucci import to_array_coord, to_ucci_coord

pos = Position()
pos.from_fen("rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR")
print(pos.to_fen())

mv = to_array_coord("h2e2")   # packed move: source square low byte, destination high
played = pos.make_move(mv)    # returns a Move with its captured piece filled in
print(to_ucci_coord(mv))      # "h2e2"
pos.undo_make_move()
```

`from_fen` takes a placement and, after it, an optional side to move: `r` or
`w` for red, `b` for black. Malformed FEN raises `ValueError`.
`make_move` raises `xqengine.position.IllegalMoveError` when the move cannot
be played. `undo_make_move` raises `IndexError` when there is nothing to
undo.

The modules:

- `xqengine.zobrist`: `ZobristKey`, an immutable three-word 32-bit key that
  combines with `xor` or `^`. It also has `rand31` and `random_key` for
  drawing keys from a `random.Random`.
- `xqengine.pieces`: the piece numbering (red 16-31, black 32-47) and helpers
  such as `piece_type`, `piece_side`, `same_side`, `fen_piece` and
  `to_fen_piece`.
- `xqengine.move`: `Move`, a packed 32-bit move. Its fields are `src`, `dst`,
  `capture` and `chkchs`, and the signed `mvlva` score shares the two high
  bytes. It has `encode()` and `Move.from_int()`.
- `xqengine.pregen`: board geometry (`coord_pc`, `in_board`, `in_fort`,
  `knight_pin`, ...) and `PreGen`, the table set. `get_pregen()` returns one
  shared instance and builds it on first use.
- `xqengine.movegen`: `MoveGenerator`, with `gen_cap_moves()`,
  `gen_non_cap_moves()` (both scored by `mv_lva`) and
  `gen_piece_moves(pos)`.
- `xqengine.position`: `Position`. It is a `MoveGenerator` that also has
  `add_piece`, `del_piece`, `make_move`, `undo_make_move`, `legal_move`,
  `gen_all_moves`, `checked_by` and `protected_by`.
- `xqengine.ucci`: `UcciParser.process_command()` turns a command line into
  a `UcciCommand` with a `UcciType` kind. `to_array_coord` and
  `to_ucci_coord` convert between text moves such as `h2e2` and packed moves.
- `xqengine.server`: `EngineServer`, `encode_packet` and the `main` command.

## Running the server

```
xqengine-server [--host HOST] [--port PORT] [-v]
```

The server listens on `127.0.0.1:9999` by default. Pass `--host Any` to bind
every address. `-v` logs every command received.

Each packet, in both directions, is an 8-byte little-endian signed length
followed by that many bytes of UTF-8 text. `encode_packet` builds one. The
server holds a single position and replies as follows:

| command                              | reply                                    |
|--------------------------------------|------------------------------------------|
| `ucci`                               | `ucci fighting!!!`                       |
| `isready`                            | `isready ready`                          |
| `position <fen\|startpos> [r\|b] [moves ...]` | none; sets up the position      |
| `getpos`                             | `getpos <fen placement>`                 |
| `getmv <square>` (e.g. `h2`)         | `getmv ` followed by the piece's moves   |
| `makemv <move>` (e.g. `h2e2`)        | `makemv ok` or `makemv illegal`          |
| `quit`                               | `quit`, then the connection closes       |

`go`, `stop` and unknown or malformed commands get no reply.
`EngineServer.handle_cmd` and `EngineServer.feed` run commands without a
socket, which is useful in tests.

## What it does not do

- There is no search or evaluation. `go` is accepted but the server never
  picks a move of its own.
- `make_move` and `makemv` do not check a piece's movement rule. They refuse
  only moves that start on an empty square, leave the board, capture a
  piece of the same side or leave the mover's king in check. Use
  `Position.legal_move` to test the movement rule.
- The server has no command to take a move back. Only
  `Position.undo_make_move` does that, in the library.