"""Simple polygon meshes, primitive generators and OFF/IOFF export."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from freedboards.board import Vec3

Color = tuple[float, float, float, float]
WHITE: Color = (1.0, 1.0, 1.0, 1.0)


def _num(value: float) -> str:
    return f"{value:g}"


@dataclass
class Mesh:
    """Vertices with colours and normals, grouped into polygons of `vpp` corners."""

    vpp: int
    indexed: bool = True
    vertices: list[Vec3] = field(default_factory=list)
    colors: list[Color] = field(default_factory=list)
    normals: list[Vec3] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        missing = len(self.vertices) - len(self.colors)
        self.colors.extend([WHITE] * max(missing, 0))
        missing = len(self.vertices) - len(self.normals)
        self.normals.extend([Vec3()] * max(missing, 0))

    @property
    def num_polys(self) -> int:
        count = len(self.indices) if self.indexed else len(self.vertices)
        return count // self.vpp

    def polygons(self) -> list[tuple[int, ...]]:
        return [
            tuple(self.indices[p:p + self.vpp])
            for p in range(0, len(self.indices), self.vpp)
        ]

    def _require_indexed(self) -> None:
        if not self.indexed:
            raise ValueError("mesh is not indexed")

    def invert_winding(self) -> None:
        """Reverse the corner order of every triangle."""
        self._require_indexed()
        if self.vpp != 3:
            raise ValueError("winding inversion needs a triangle mesh")
        self.indices[0::3], self.indices[2::3] = self.indices[2::3], self.indices[0::3]

    def apply_matrix(self, matrix: Sequence[Sequence[float]]) -> None:
        """Transform every vertex by a 4x4 row-major affine matrix."""
        rows = [list(row) for row in matrix]
        if len(rows) < 3 or any(len(row) != 4 for row in rows):
            raise ValueError("expected a 4x4 matrix")
        self.vertices = [
            Vec3(*(r[0] * v.x + r[1] * v.y + r[2] * v.z + r[3] for r in rows[:3]))
            for v in self.vertices
        ]

    def paint(self, color: Color) -> None:
        self.colors = [tuple(color)] * len(self.vertices)

    def to_off(self) -> str:
        self._require_indexed()
        lines = [
            "OFF",
            f"{len(self.vertices)} {self.num_polys} {self.num_polys * self.vpp}",
        ]
        lines.extend(" ".join(_num(c) for c in v) for v in self.vertices)
        lines.extend(
            f"{self.vpp} " + "".join(f"{i} " for i in poly) for poly in self.polygons()
        )
        return "\n".join(lines) + "\n"

    def to_ioff(self, model_name: str, color: bool, normals: bool) -> str:
        self._require_indexed()
        layout = ("C4F_" if color else "") + ("N3F_" if normals else "") + "V3F "
        parts = [
            f"IOFF( {model_name}, {len(self.vertices)}, {self.num_polys}, "
            f"{self.vpp}, {layout})\n{{\n"
        ]
        for vertex, rgba, normal in zip(self.vertices, self.colors, self.normals):
            fields = []
            if color:
                fields.extend(rgba)
            if normals:
                fields.extend(normal)
            fields.extend(vertex)
            parts.append("\t{ " + ", ".join(_num(f) for f in fields) + "},\n")
        parts.append("},\n{\n")
        for poly in self.polygons():
            parts.append("\t" + "".join(f"{i}, " for i in poly) + "\n")
        parts.append(f"}}\nIOFF_END({model_name})\n")
        return "".join(parts)


def sphere_mesh(rings: int, slices: int) -> Mesh:
    """A unit triangle sphere of `rings` latitude rings plus two poles."""
    vertices = []
    for r in range(rings):
        z = (r + 1) / (rings + 1) * 2.0 - 1.0
        scale = math.sqrt(1.0 - z * z)
        for s in range(slices):
            d = s / slices * 2 * math.pi
            vertices.append(Vec3(math.cos(d) * scale, math.sin(d) * scale, z))
    vertices.append(Vec3(0, 0, -1))
    vertices.append(Vec3(0, 0, 1))
    bottom, top = len(vertices) - 2, len(vertices) - 1

    tris: list[tuple[int, int, int]] = []
    for r in range(rings - 1):
        row, nxt = r * slices, (r + 1) * slices
        for s in range(slices):
            s1 = (s + 1) % slices
            tris.append((row + s, row + s1, nxt + s))
            tris.append((row + s1, nxt + s1, nxt + s))
    tris.extend((bottom, (i + 1) % slices, i) for i in range(slices))
    last = (rings - 1) * slices
    tris.extend((top, last + i, last + (i + 1) % slices) for i in range(slices))

    return Mesh(
        vpp=3,
        vertices=vertices,
        colors=[(1.0, 1.0, 1.0, 0.25)] * len(vertices),
        indices=[i for tri in tris for i in tri],
    )


def _cube_corners() -> list[Vec3]:
    return [
        Vec3(-1, -1, -1), Vec3(1, -1, -1), Vec3(1, 1, -1), Vec3(-1, 1, -1),
        Vec3(-1, -1, 1), Vec3(1, -1, 1), Vec3(1, 1, 1), Vec3(-1, 1, 1),
    ]


def quad_cube_mesh() -> Mesh:
    """A cube of side 2 centred on the origin, made of six quads."""
    faces = [
        (3, 2, 1, 0),  # back
        (4, 5, 6, 7),  # front
        (0, 4, 7, 3),
        (1, 2, 6, 5),
        (3, 7, 6, 2),  # top
        (0, 1, 5, 4),  # bottom
    ]
    return Mesh(vpp=4, vertices=_cube_corners(), indices=[i for f in faces for i in f])


def cube_mesh() -> Mesh:
    """A cube of side 2 centred on the origin, made of twelve triangles."""
    tris = [
        (2, 1, 0), (0, 3, 2),
        (0, 4, 7), (7, 3, 0),
        (4, 5, 6), (6, 7, 4),
        (3, 7, 6), (6, 2, 3),
        (5, 4, 0), (0, 1, 5),
        (6, 5, 1), (1, 2, 6),
    ]
    return Mesh(vpp=3, vertices=_cube_corners(), indices=[i for t in tris for i in t])