"""Deterministic triangle generation for the built-in solids."""

from __future__ import annotations

import math

Vertex = tuple[float, float, float]
Triangle = tuple[Vertex, Vertex, Vertex]


def cube_triangles(size: tuple[float, float, float], center: bool = False) -> list[Triangle]:
    """Box: 8 corners, 12 triangles (6 quads, outward winding)."""
    sx, sy, sz = size
    x0 = -sx / 2 if center else 0.0
    y0 = -sy / 2 if center else 0.0
    z0 = -sz / 2 if center else 0.0
    x1, y1, z1 = x0 + sx, y0 + sy, z0 + sz

    v = [
        (x0, y0, z0),
        (x1, y0, z0),
        (x1, y1, z0),
        (x0, y1, z0),
        (x0, y0, z1),
        (x1, y0, z1),
        (x1, y1, z1),
        (x0, y1, z1),
    ]

    # (a, b, c, d) corner indices per face
    faces = [
        (0, 3, 2, 1),  # bottom
        (4, 5, 6, 7),  # top
        (0, 1, 5, 4),  # front
        (1, 2, 6, 5),  # right
        (2, 3, 7, 6),  # back
        (3, 0, 4, 7),  # left
    ]

    triangles: list[Triangle] = []
    for a, b, c, d in faces:
        triangles.append((v[a], v[b], v[c]))
        triangles.append((v[a], v[c], v[d]))
    return triangles


def cylinder_triangles(h: float, r: float, segments: int, center: bool = False) -> list[Triangle]:
    """Cylinder around +Z: 4 triangles per wedge (2 side, 1 bottom, 1 top).

    Wedge 0 starts at angle 0 on the +X axis.
    """
    z0 = -h / 2 if center else 0.0
    z1 = z0 + h
    bottom_center = (0.0, 0.0, z0)
    top_center = (0.0, 0.0, z1)

    bottom: list[Vertex] = []
    top: list[Vertex] = []
    for i in range(segments):
        angle = 2 * math.pi * i / segments
        x = math.cos(angle) * r
        y = math.sin(angle) * r
        bottom.append((x, y, z0))
        top.append((x, y, z1))

    triangles: list[Triangle] = []
    for i in range(segments):
        j = (i + 1) % segments
        triangles.append((bottom[i], bottom[j], top[j]))
        triangles.append((bottom[i], top[j], top[i]))
        triangles.append((bottom_center, bottom[j], bottom[i]))
        triangles.append((top_center, top[i], top[j]))
    return triangles
