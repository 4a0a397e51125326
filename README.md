# freedboards

Board topologies and game logic for Go and the colour-flooding game Invasion.
The boards need not be flat grids. They can be spheres, tori, Mobius strips,
cylinders, cubes, honeycomb lattices, layered planes or a diamond shape.

## Installation

```
pip install freedboards
```

To run the tests:

```
pip install "freedboards[test]"
pytest
```

## Boards

`freedboards.board` holds the basic types:

- `Board`: a list of `GoNode`s with a `name`, a `node_scale` and two start nodes (`start_p0`, `start_p1`).
- `GoNode`: a node with its `neighbors`, `position` and `normal` (each a `Vec3`).
- `BoardState`: one byte of state per node.
- `BoardDelta`: the node changes made by one turn. `BoardDelta.between` builds one from two states, `undo` restores the earlier state and `cancels` detects a move that reverses the previous one.

`Board.to_json()` returns the board as a dict. `Board.write_json(path)` writes it to a file.

The boards themselves are built by the functions in `freedboards.shapes`:
`sphere`, `torus`, `mobius`, `cylinder`, `honeycomb6`, `honeycomb5`,
`honeycomb3`, `layered`, `cube`, `standard` and `diamond`.

```python
from freedboards.shapes import torus, board_from_name

board = torus(13, 13)
print(len(board), board.start_p0, board.start_p1)

board = board_from_name("sphere")
print(board.to_json()["NodeScale"])
```

`board_from_name` knows these names:

- `diamond`
- `flat`
- `sphere`
- `mobius`
- `torus`
- `3`
- `5`
- `6`
- `layered`
- `cylinder`
- `box`

Any other name is read as the path of a board file, using `freedboards.board.load_board`. If no such file exists, it raises `FileNotFoundError`. `board_exists(name)` tells whether a name can be turned into a board.

A board file is whitespace-separated:

1. The node count and the node scale.
2. One record per node: the number of neighbours, the neighbour indices, and the x, y and z position.

Links are made in both directions.

## Go

```python
from freedboards.go import GoGame, GoError
from freedboards.shapes import board_from_name

game = GoGame(board_from_name("flat"))
game.click(40)
game.pass_turn()
try:
    game.click(40)
except GoError as exc:
    print(exc)            # Spot already taken
print(game.end_game())
```

`GoRules.make_move` places a stone and removes captured groups. It raises `GoError` for an occupied point or for suicide.

`GoRules.land_stats` returns the number of empty points enclosed by white only, by black only, and the rest.

`GoGame` does the following:

- It records each turn in `history`, and `undo` takes turns back.
- It rejects a move that reverses the previous one with "KO Violation".
- It counts captured stones in `scores`.
- When `remove_dead_mode` is set, `click` removes a stone instead of playing one.
- `end_game` returns the result text.

For play over a network, call `GoGame.init_remote_game(transport)` with a `freedboards.net.Transport`. `check_network` then handles incoming `Packet`s: moves, passes, undo, new-game and board-switch requests. Messages for the player go to the `notify(text, title)` callback, and questions go to `confirm(text, title)`. By default, messages are collected in `GoGame.messages` and every request is declined.

`Transport` is a plain TCP link between one host and one client:

- `host_setup` and `wait_for_client` (or `wait_for_client_async`) set up the host side.
- `client_setup` connects a client.
- `send` and `receive` move raw bytes.
- `send_string` and `receive_string` move length-prefixed strings.
- Failures raise `NetError`.

## Invasion

```python
import random

from freedboards.invasion import InvasionGame, NUM_COLORS
from freedboards.shapes import mobius

game = InvasionGame(mobius(15, 6), rng=random.Random(1))
taken = {game.state[game.board.start_p0], game.state[game.board.start_p1]}
color = next(c for c in range(NUM_COLORS) if c not in taken)
reply = game.choose(color)   # the computer's answer in one-player mode
print(game.score_zero, game.score_one, reply)
print(game.result_message())  # None until the game is over
```

Each turn, a player floods the region that grows from their start node with a new colour. A colour held by either start node raises `InvasionError`.

- With `two_player=True`, the turns alternate.
- Otherwise `InvasionAI.think` chooses the reply by a fixed-depth look-ahead.
- `undo` takes back the last turn.

## Meshes

`freedboards.mesh` has the `Mesh` class and three generators: `sphere_mesh`, `cube_mesh` (triangles) and `quad_cube_mesh`.

A mesh can be transformed by a 4x4 matrix (`apply_matrix`), recoloured (`paint`) and have its triangle winding reversed (`invert_winding`). It can also be exported as OFF text (`to_off`) or IOFF text (`to_ioff`).

## Command line

```
freedboards sphere
freedboards pyramid.txt -o pyramid.json
```

This builds the named board, or loads the board file, and writes its nodes and links as JSON. By default the output goes to `NAME.go_3d.json`; use `-o`/`--output` to choose another path.

## What this package does not do

There is no graphical display and no interactive game front end. The games are libraries to be driven by your own code. The only command exports boards as JSON.