"""Derived mesh properties: bounds and face normals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from tinyscad.tessellation import Triangle

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a mesh."""

    min: Vec3
    max: Vec3
    size: Vec3
    center: Vec3

    def as_dict(self) -> dict[str, list[float]]:
        return {
            "min": list(self.min),
            "max": list(self.max),
            "size": list(self.size),
            "center": list(self.center),
        }


def mesh_array(triangles: Sequence[Triangle]) -> np.ndarray:
    """Return the mesh as an ``(N, 3, 3)`` float64 array."""
    if len(triangles) == 0:
        return np.zeros((0, 3, 3), dtype=np.float64)
    return np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)


def compute_bounds(triangles: Sequence[Triangle]) -> Bounds | None:
    """Componentwise min/max over every vertex; ``None`` for an empty mesh."""
    if len(triangles) == 0:
        return None

    points = mesh_array(triangles).reshape(-1, 3)
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    return Bounds(
        min=_to_vec(lo),
        max=_to_vec(hi),
        size=_to_vec(hi - lo),
        center=_to_vec((lo + hi) / 2),
    )


def compute_normal(triangle: Triangle) -> Vec3:
    """Unit normal of ``(v1 - v0) x (v2 - v0)``.

    A degenerate triangle yields the zero vector instead of raising.
    """
    return _to_vec(compute_normals([triangle])[0])


def compute_normals(triangles: Sequence[Triangle]) -> np.ndarray:
    """Unit face normals as an ``(N, 3)`` array, zero rows for degenerate faces."""
    arr = mesh_array(triangles)
    cross = np.cross(arr[:, 1] - arr[:, 0], arr[:, 2] - arr[:, 0])
    lengths = np.linalg.norm(cross, axis=1)
    lengths[lengths == 0] = 1.0
    return cross / lengths[:, np.newaxis]


def _to_vec(values: np.ndarray) -> Vec3:
    return (float(values[0]), float(values[1]), float(values[2]))
