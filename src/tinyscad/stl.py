"""ASCII STL export."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from tinyscad.errors import TinyScadError
from tinyscad.mesh import compute_normals
from tinyscad.tessellation import Triangle

DEFAULT_SOLID_NAME = "tinyscad"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def sanitize_solid_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``."""
    return _UNSAFE_NAME_CHARS.sub("_", name)


def to_ascii_stl(triangles: Sequence[Triangle], solid_name: str = DEFAULT_SOLID_NAME) -> str:
    """Render a triangle list as ASCII STL text (no trailing newline)."""
    name = sanitize_solid_name(solid_name)
    normals = compute_normals(triangles)

    lines = [f"solid {name}"]
    for triangle, normal in zip(triangles, normals):
        lines.append(f"  facet normal {_fmt_vec(normal)}")
        lines.append("    outer loop")
        for vertex in triangle:
            lines.append(f"      vertex {_fmt_vec(vertex)}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines)


def write_ascii_stl(
    triangles: Sequence[Triangle], path: Path, solid_name: str = DEFAULT_SOLID_NAME
) -> None:
    """Write ASCII STL to ``path``."""
    try:
        path.write_text(to_ascii_stl(triangles, solid_name) + "\n", encoding="utf-8")
    except OSError as e:
        raise TinyScadError(f"Cannot write STL to {path}: {e}") from e


def _fmt(value: float) -> str:
    # round first so tiny negatives collapse to -0.0, then + 0.0 folds that into 0.0
    return f"{round(float(value), 6) + 0.0:.6f}"


def _fmt_vec(vec: Sequence[float]) -> str:
    return " ".join(_fmt(v) for v in vec)
