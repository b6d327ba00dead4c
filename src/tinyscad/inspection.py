"""Template inspection: metadata, resolved params and mesh diagnostics."""

from __future__ import annotations

import math
from typing import Mapping

from tinyscad.config import EngineConfig
from tinyscad.mesh import compute_bounds
from tinyscad.templates import Template


def inspect_template(
    template: Template,
    overrides: Mapping[str, float] | None = None,
    config: EngineConfig | None = None,
    clamp: bool = True,
) -> dict[str, object]:
    """Evaluate ``template`` and return a JSON-ready diagnostics payload."""
    params = template.resolve_params(overrides, clamp=clamp)
    triangles = template.render(params, config=config, clamp=False)
    bounds = compute_bounds(triangles)

    return {
        "id": template.metadata.id,
        "name": template.metadata.name,
        "description": template.metadata.description,
        "params": [
            {
                "key": p.key,
                "label": p.label,
                "min": _json_number(p.min),
                "max": _json_number(p.max),
                "step": _json_number(p.step),
                "default": _json_number(p.default_value),
                "value": _json_number(params[p.key]),
            }
            for p in template.metadata.params
        ],
        "triangle_count": len(triangles),
        "bounds": bounds.as_dict() if bounds is not None else None,
    }


def render_text(payload: dict[str, object]) -> str:
    """Render an inspection payload as human-readable text."""
    lines = [f"Template: {payload['name']} ({payload['id']})"]
    if payload.get("description"):
        lines.append(f"  {payload['description']}")

    params = payload.get("params") or []
    lines.append(f"Params: {len(params)}")
    for p in params:
        lines.append(
            f"  {p['key']:<16} = {_fmt_num(p['value'])}"
            f"  [{_fmt_num(p['min'])} .. {_fmt_num(p['max'])}, step {_fmt_num(p['step'])}]"
            f"  {p['label']}"
        )

    lines.append(f"Triangles: {payload['triangle_count']}")
    bounds = payload.get("bounds")
    if bounds is None:
        lines.append("Bounds: (empty mesh)")
    else:
        lines.append(f"Bounds min:    {_fmt_vec(bounds['min'])}")
        lines.append(f"Bounds max:    {_fmt_vec(bounds['max'])}")
        lines.append(f"Bounds size:   {_fmt_vec(bounds['size'])}")
        lines.append(f"Bounds center: {_fmt_vec(bounds['center'])}")
    return "\n".join(lines) + "\n"


def _json_number(value: float) -> float | None:
    """JSON has no NaN/Infinity; report them as null."""
    return value if math.isfinite(value) else None


def _fmt_num(value: object) -> str:
    if value is None:
        return "NaN"
    return f"{float(value):g}"


def _fmt_vec(vec: object) -> str:
    return "[" + ", ".join(f"{float(v):.4f}" for v in vec) + "]"
