"""Board topology: nodes, neighbour links, per-node state and state deltas."""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Vec3:
    """An immutable three-component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, other: Union[Vec3, Number]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vec3(self.x * other, self.y * other, self.z * other)

    __rmul__ = __mul__

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    @property
    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def normalized(self) -> Vec3:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length
        if length == 0:
            return self
        return Vec3(self.x / length, self.y / length, self.z / length)

    def to_json(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass
class GoNode:
    """A playable point on a board and the indices of its neighbours."""

    index: int
    neighbors: list[int] = field(default_factory=list)
    position: Vec3 = field(default_factory=Vec3)
    normal: Vec3 = field(default_factory=Vec3)

    def add_neighbor(self, index: int) -> None:
        self.neighbors.append(index)

    def safe_add_neighbor(self, index: int) -> None:
        """Add a neighbour unless it is already linked."""
        if index not in self.neighbors:
            self.neighbors.append(index)

    def to_json(self) -> dict:
        return {
            "Index": self.index,
            "Neighbors": list(self.neighbors),
            "Position": self.position.to_json(),
            "Normal": self.normal.to_json(),
            "NumNeighbors": len(self.neighbors),
        }


@dataclass
class Board:
    """A graph of nodes with a name, a display scale and two start nodes."""

    nodes: list[GoNode] = field(default_factory=list)
    name: str | None = None
    node_scale: float = 1.0
    start_p0: int = 0
    start_p1: int = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> GoNode:
        return self.nodes[index]

    def __iter__(self) -> Iterator[GoNode]:
        return iter(self.nodes)

    def reset(self, size: int) -> None:
        """Replace all nodes with `size` fresh, unlinked nodes."""
        self.nodes = [GoNode(i) for i in range(size)]

    def set_all_normals(self, normal: Vec3) -> None:
        for node in self.nodes:
            node.normal = normal

    def to_json(self) -> dict:
        return {
            "Name": self.name,
            "NodeScale": self.node_scale,
            "StartP0": self.start_p0,
            "StartP1": self.start_p1,
            "Nodes": [node.to_json() for node in self.nodes],
        }

    def write_json(self, path: Union[str, os.PathLike]) -> None:
        Path(path).write_text(json.dumps(self.to_json(), indent=1), encoding="utf-8")


@dataclass
class BoardState:
    """One byte of state per node of a board."""

    board: Board = field(compare=False, repr=False)
    states: bytearray = field(default_factory=bytearray)

    def __init__(self, board: Board, fill: int = 0, states: bytes | None = None):
        self.board = board
        if states is None:
            self.states = bytearray([fill]) * len(board.nodes)
        else:
            if len(states) != len(board.nodes):
                raise ValueError("state length does not match the board")
            self.states = bytearray(states)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> int:
        return self.states[index]

    def __setitem__(self, index: int, value: int) -> None:
        self.states[index] = value

    def __iter__(self) -> Iterator[int]:
        return iter(self.states)

    def copy(self) -> BoardState:
        return BoardState(self.board, states=self.states)


@dataclass(frozen=True)
class NodeDelta:
    """The change of one node's state."""

    index: int
    before: int
    after: int


@dataclass(frozen=True)
class BoardDelta:
    """The node changes made by one turn, enough to undo it."""

    turn_from: int
    turn_to: int
    deltas: tuple[NodeDelta, ...] = ()

    @classmethod
    def between(
        cls, turn_from: int, before: BoardState, turn_to: int, after: BoardState
    ) -> BoardDelta:
        if len(before) != len(after):
            raise ValueError("states belong to boards of different sizes")
        changes = tuple(
            NodeDelta(i, old, new)
            for i, (old, new) in enumerate(zip(before, after))
            if old != new
        )
        return cls(turn_from, turn_to, changes)

    def undo(self, state: BoardState) -> int:
        """Restore the previous node states and return the turn it was."""
        for delta in self.deltas:
            state[delta.index] = delta.before
        return self.turn_from

    def cancels(self, other: BoardDelta) -> bool:
        """True if applying `other` after this one restores the board."""
        if len(self.deltas) != len(other.deltas):
            return False
        by_index = {d.index: d for d in other.deltas}
        for delta in self.deltas:
            match = by_index.get(delta.index)
            if match is None:
                return False
            if delta.before != match.after or delta.after != match.before:
                return False
        return True


def is_file(path: Union[str, os.PathLike]) -> bool:
    return os.path.isfile(path)


def load_board(path: Union[str, os.PathLike]) -> Board:
    """Read a board from a whitespace-separated node list file.

    The file holds the node count and node scale, then for each node the
    number of neighbours, the neighbour indices and the x y z position.
    Links are made in both directions.
    """
    text = Path(path).read_text(encoding="utf-8")
    tokens = iter(text.split())

    def take(kind):
        try:
            return kind(next(tokens))
        except StopIteration:
            raise ValueError(f"{path}: unexpected end of board file") from None

    count = take(int)
    board = Board(node_scale=take(float))
    board.reset(count)
    for node in board.nodes:
        for _ in range(take(int)):
            other = take(int)
            if not 0 <= other < count:
                raise ValueError(f"{path}: neighbour index {other} out of range")
            node.safe_add_neighbor(other)
            board.nodes[other].safe_add_neighbor(node.index)
        node.position = Vec3(take(float), take(float), take(float))
    board.name = str(path)
    board.set_all_normals(Vec3(0, 0, 1))
    return board