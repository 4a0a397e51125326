"""Generators for the built-in board topologies and lookup of boards by name."""

from __future__ import annotations

import argparse
import json
import math
import sys
from pathlib import Path
from typing import Callable, Sequence

from freedboards.board import Board, GoNode, Vec3, is_file, load_board

SPECIAL_RATIO = 1.0

_UP = Vec3(0, 1, 0)
_OUT = Vec3(0, 0, 1)


def _grid_position(x: int, y: int, width: int, height: int) -> Vec3:
    return Vec3(2.0 * x / (width - 1) - 1.0, 2.0 * y / (height - 1) - 1.0, 0.0)


def _flat_scale(width: int, height: int) -> float:
    return 1.0 / width if width > height else 1.0 / height


def sphere(rings: int, slices: int) -> Board:
    """Latitude rings of `slices` nodes each, closed by two pole nodes."""
    board = Board()
    board.reset(rings * slices + 2)
    board.node_scale = 1.95 / (slices - 1)
    count = len(board)
    board.start_p0 = count - 2
    board.start_p1 = count - 1

    for r in range(rings):
        z = (r + 1) / (rings + 1) * 2.0 - 1.0
        scale = math.sqrt(1.0 - z * z)
        if z >= 0:
            z += (math.sqrt(z) - z) / 4.0
        else:
            z -= (math.sqrt(-z) + z) / 4.0
        row = r * slices
        for s in range(slices):
            node = board[row + s]
            node.neighbors = [row + (s + 1) % slices, row + (s + slices - 1) % slices]
            if r != 0:
                node.add_neighbor((r - 1) * slices + s)
            if r < rings - 1:
                node.add_neighbor((r + 1) * slices + s)
            d = s / slices * 2 * math.pi
            node.position = Vec3(math.cos(d) * scale, z, math.sin(d) * scale)
            node.normal = node.position

    south = board[count - 2]
    south.position = Vec3(0, -1, 0)
    south.normal = south.position
    south.neighbors = []
    for i in range(slices):
        south.add_neighbor(i)
        board[i].add_neighbor(count - 2)

    north = board[count - 1]
    north.position = Vec3(0, 1, 0)
    north.normal = north.position
    north.neighbors = []
    last = (rings - 1) * slices
    for i in range(slices):
        north.add_neighbor(last + i)
        board[last + i].add_neighbor(count - 1)
    return board


def torus(width: int, height: int) -> Board:
    """A grid wrapped in both directions around a torus."""
    board = Board()
    board.reset(width * height)
    board.node_scale = SPECIAL_RATIO * 1.65 / height
    board.start_p0 = 0
    board.start_p1 = width // 2 + (height // 2) * width

    for y in range(height):
        for x in range(width):
            ang = math.pi * 2 * (x / width)
            pitch = math.pi * 2.0 * (y / height)
            ring = Vec3(math.cos(ang), math.sin(ang), 0)
            offset = Vec3(ring.x * math.sin(pitch), ring.y * math.sin(pitch), math.cos(pitch)) * 0.5

            node = board[x + y * width]
            node.neighbors = [
                (x + width - 1) % width + y * width,
                (x + 1) % width + y * width,
                x + ((y + height - 1) % height) * width,
                x + ((y + 1) % height) * width,
            ]
            node.position = ring + offset
            node.normal = offset
    return board


def mobius(width: int, height: int) -> Board:
    """A strip whose ends join with a half twist."""
    board = Board()
    board.reset(width * height)
    board.node_scale = 0.75 / height
    board.start_p1 = (height - 1) * width
    board.start_p0 = (height - 1) * width + width // 2

    for y in range(height):
        length = y / (height - 1) * 2 - 1
        for x in range(width):
            ang = math.pi * 2 * (x / width)
            pitch = math.pi * (x / width)
            ring = Vec3(math.cos(ang), math.sin(ang), 0)
            offset = Vec3(ring.x * math.sin(pitch), ring.y * math.sin(pitch), math.cos(pitch)) * 0.5

            node = board[x + y * width]
            mirrored = (height - y - 1) * width
            node.neighbors = [
                (x - 1) + y * width if x > 0 else (width - 1) + mirrored,
                (x + 1) + y * width if x < width - 1 else mirrored,
            ]
            if y != 0:
                node.add_neighbor(x + (y - 1) * width)
            if y < height - 1:
                node.add_neighbor(x + (y + 1) * width)
            node.position = ring + offset * length

    for node in board:
        centre = node.position
        a, b, c = (board[n].position for n in node.neighbors[:3])
        c = c - centre
        a = (a - centre).cross(c)
        b = (b - centre).cross(c)
        if a.dot(b) < 0:
            a = -a
        node.normal = a + b
    return board


def cylinder(width: int, height: int) -> Board:
    """A grid wrapped around a cylinder, open at top and bottom."""
    board = Board()
    board.reset(width * height)
    board.node_scale = 1.0 / height
    board.start_p0 = 0
    board.start_p1 = (height - 1) * width + width // 2
    offset = Vec3(0, 0.8, 0)

    for y in range(height):
        length = y / (height - 1) * 2 - 1
        for x in range(width):
            ang = math.pi * 2 * (x / width)
            ring = Vec3(math.cos(ang) * 0.8, 0, math.sin(ang) * 0.8)
            node = board[x + y * width]
            node.neighbors = [
                (x + width - 1) % width + y * width,
                (x + 1) % width + y * width,
            ]
            if y != 0:
                node.add_neighbor(x + (y - 1) * width)
            if y < height - 1:
                node.add_neighbor(x + (y + 1) * width)
            node.position = ring + offset * length
            node.normal = ring
    return board


def _honeycomb(
    width: int,
    height: int,
    horizontal: Callable[[int], bool],
    down_left: Callable[[int], bool],
    down_right: Callable[[int], bool],
    shifted: Callable[[int], bool],
) -> Board:
    board = Board()
    board.reset(width * height)
    board.node_scale = _flat_scale(width, height)
    board.start_p0 = (height - 1) * width
    board.start_p1 = width - 1

    for y in range(height):
        for x in range(width):
            here = x + y * width
            node = board[here]
            if horizontal(y):
                if x != 0:
                    node.add_neighbor((x - 1) + y * width)
                if x < width - 1:
                    node.add_neighbor((x + 1) + y * width)
            if y != 0:
                node.add_neighbor(x + (y - 1) * width)
            if y < height - 1:
                node.add_neighbor(x + (y + 1) * width)
            if down_left(y) and y < height - 1 and x > 0:
                other = (x - 1) + (y + 1) * width
                node.add_neighbor(other)
                board[other].add_neighbor(here)
            if down_right(y) and y < height - 1 and x < width - 1:
                other = (x + 1) + (y + 1) * width
                node.add_neighbor(other)
                board[other].add_neighbor(here)

            position = _grid_position(x, y, width, height)
            if shifted(y):
                position = position + Vec3(1.0 / (width - 1), 0, 0)
            node.position = position
    board.set_all_normals(_OUT)
    return board


def honeycomb6(width: int, height: int) -> Board:
    """A staggered grid where inner nodes have six neighbours."""
    return _honeycomb(
        width,
        height,
        horizontal=lambda y: True,
        down_left=lambda y: y % 2 == 0,
        down_right=lambda y: y % 2 == 1,
        shifted=lambda y: y % 2 == 1,
    )


def honeycomb5(width: int, height: int) -> Board:
    """A staggered grid where inner nodes have at most five neighbours."""
    return _honeycomb(
        width,
        height,
        horizontal=lambda y: True,
        down_left=lambda y: (y - 1) % 4 == 0,
        down_right=lambda y: (y - 3) % 4 == 0,
        shifted=lambda y: y % 4 >= 2,
    )


def honeycomb3(width: int, height: int) -> Board:
    """A hexagonal lattice where inner nodes have three neighbours."""
    return _honeycomb(
        width,
        height,
        horizontal=lambda y: y == 0 or y == height - 1,
        down_left=lambda y: (y - 1) % 4 == 0,
        down_right=lambda y: (y - 3) % 4 == 0,
        shifted=lambda y: y % 4 >= 2,
    )


def layered(width: int, height: int) -> Board:
    """Two stacked three-neighbour lattices, each node linked to its twin."""
    worker = honeycomb3(width, height)
    count = len(worker)
    board = Board(node_scale=worker.node_scale)
    board.start_p0 = worker.start_p0
    board.start_p1 = worker.start_p1 + count

    upper = [
        GoNode(
            i,
            neighbors=[*src.neighbors, i + count],
            position=src.position + Vec3(0, 0, 0.35),
        )
        for i, src in enumerate(worker)
    ]
    lower = [
        GoNode(
            i + count,
            neighbors=[n + count for n in src.neighbors] + [i],
            position=src.position + Vec3(0, 0, -0.35),
        )
        for i, src in enumerate(worker)
    ]
    board.nodes = upper + lower
    board.set_all_normals(_OUT)
    return board


def cube(size: int) -> Board:
    """A solid three-dimensional grid of `size` nodes along each edge."""
    scale = 0.75
    board = Board()
    board.reset(size ** 3)
    board.node_scale = scale / size
    board.start_p0 = 0
    board.start_p1 = (size - 1) * size * size + (size - 1) * size + (size - 1)
    layer = size * size

    def coord(v: int) -> float:
        return 2.0 * v / (size - 1) - 1.0

    for z in range(size):
        for y in range(size):
            for x in range(size):
                here = x + y * size + z * layer
                node = board[here]
                if x != 0:
                    node.add_neighbor(here - 1)
                if x < size - 1:
                    node.add_neighbor(here + 1)
                if y != 0:
                    node.add_neighbor(here - size)
                if y < size - 1:
                    node.add_neighbor(here + size)
                if z != 0:
                    node.add_neighbor(here - layer)
                if z < size - 1:
                    node.add_neighbor(here + layer)
                node.position = Vec3(coord(x), coord(y), coord(z)) * scale
    board.set_all_normals(_UP)
    return board


def standard(width: int, height: int) -> Board:
    """The ordinary flat square grid."""
    board = Board()
    board.reset(width * height)
    board.node_scale = _flat_scale(width, height)
    board.start_p0 = (height - 1) * width
    board.start_p1 = width - 1

    for y in range(height):
        for x in range(width):
            node = board[x + y * width]
            if x != 0:
                node.add_neighbor((x - 1) + y * width)
            if x < width - 1:
                node.add_neighbor((x + 1) + y * width)
            if y != 0:
                node.add_neighbor(x + (y - 1) * width)
            if y < height - 1:
                node.add_neighbor(x + (y + 1) * width)
            node.position = _grid_position(x, y, width, height)
    board.set_all_normals(_OUT)
    return board


def _diamond_layer(index: int) -> tuple[int, int, int]:
    """Side length and x, y within its layer of the node at `index`."""
    growing = True
    layer = 1
    area = 1
    while index >= area:
        index -= area
        layer = layer + 2 if growing else layer - 2
        if layer <= 0:
            raise ValueError("diamond layer index out of range")
        if layer == 7:
            growing = False
        area = layer * layer
    return layer, index % layer, index // layer


def _diamond_find(board: Board, target: Vec3) -> GoNode | None:
    for node in board:
        pos = node.position
        if pos.x == target.x and pos.y == target.y and pos.z <= target.z:
            return node
    return None


def diamond() -> Board:
    """Square layers stacked into a diamond, linked in a diagonal lattice."""
    board = Board()
    board.reset(1 + 9 + 25 + 47 + 25 + 9 + 1 - 12 - 12 - 8)
    board.start_p0 = 0
    board.start_p1 = 1

    for i, node in enumerate(board):
        side, x, y = _diamond_layer(i)
        half = side >> 1
        node.position = Vec3(float(x - half), float(y - half), -100.0)

    origin = board[0]
    origin.position = Vec3(origin.position.x, origin.position.y, 1.0)
    queue: list[tuple[GoNode, int]] = [(origin, 1)]
    head = 0
    while head < len(queue):
        node, dx = queue[head]
        head += 1
        step = Vec3(dx, (dx + 1) % 2, -0.15)
        for delta in (step, Vec3(-step.x, -step.y, step.z)):
            other = _diamond_find(board, node.position + delta)
            if other is None:
                continue
            node.add_neighbor(other.index)
            other.add_neighbor(node.index)
            if other.position.z < -50:
                queue.append((other, (dx + 1) % 2))
                p = other.position
                other.position = Vec3(p.x, p.y, node.position.z + delta.z)

    board.node_scale = 0.15
    scale = Vec3(0.3, 0.3, 1.3)
    for node in board:
        p = node.position * scale
        node.position = Vec3(p.x, p.z, p.y)
    board.set_all_normals(_UP)
    return board


_NAMED: dict[str, Callable[[], Board]] = {
    "diamond": diamond,
    "flat": lambda: standard(9, 9),
    "sphere": lambda: sphere(7, 15),
    "mobius": lambda: mobius(13, 6),
    "torus": lambda: torus(13, 13),
    "3": lambda: honeycomb3(9, 10),
    "5": lambda: honeycomb5(9, 10),
    "6": lambda: honeycomb6(9, 10),
    "layered": lambda: layered(9, 10),
    "cylinder": lambda: cylinder(13, 9),
    "box": lambda: cube(5),
}

BOARD_NAMES: tuple[str, ...] = tuple(_NAMED)


def board_exists(name: str) -> bool:
    """True if `name` is a built-in board or a readable board file."""
    return name in _NAMED or is_file(name)


def board_from_name(name: str) -> Board:
    """Build a named board, or load it from the file of that name."""
    factory = _NAMED.get(name)
    if factory is not None:
        board = factory()
        board.name = name
        return board
    if not is_file(name):
        raise FileNotFoundError(f"no board named {name!r}")
    return load_board(name)


def main(argv: Sequence[str] | None = None) -> int:
    """Write a board's topology as JSON."""
    parser = argparse.ArgumentParser(
        prog="freedboards", description="Export a board's nodes and links as JSON."
    )
    parser.add_argument(
        "name", help="board name (" + ", ".join(BOARD_NAMES) + ") or board file"
    )
    parser.add_argument("-o", "--output", help="output path (default: NAME.go_3d.json)")
    args = parser.parse_args(argv)

    try:
        board = board_from_name(args.name)
    except (OSError, ValueError) as exc:
        print(f"freedboards: {exc}", file=sys.stderr)
        return 1

    output = Path(args.output or f"{Path(args.name).name}.go_3d.json")
    print(f"Writing file '{output}'...")
    try:
        board.write_json(output)
    except OSError as exc:
        print(f"freedboards: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())