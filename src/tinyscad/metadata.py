"""Template identity and parameter metadata from ``// @`` directive comments."""

from __future__ import annotations

import math
import re

from pydantic import BaseModel, ConfigDict

from tinyscad.errors import InvalidParamDirective

DIRECTIVE_PREFIX = "// @"
PARAM_FIELD_COUNT = 6

_LINE_SPLIT = re.compile(r"\r?\n")
_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)")


class ParamSpec(BaseModel):
    """One adjustable template parameter (a UI slider downstream)."""

    model_config = ConfigDict(extra="forbid")

    key: str
    label: str
    min: float
    max: float
    step: float
    default_value: float


class TemplateMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str = ""
    params: list[ParamSpec] = []

    def param_keys(self) -> list[str]:
        return [p.key for p in self.params]


def parse_metadata(source: str, fallback_id: str = "brick") -> TemplateMetadata:
    """Collect ``// @id``, ``@name``, ``@description`` and ``@param`` directives.

    Directives are read line by line in file order, independently of the
    geometry grammar. Unknown directives are ignored. Duplicate ``@param``
    keys are kept as separate entries.

    Raises:
        InvalidParamDirective: If a ``@param`` line has fewer than 6
            ``|``-separated fields.
    """
    ident = fallback_id
    name = fallback_id
    description = ""
    params: list[ParamSpec] = []

    for raw_line in _LINE_SPLIT.split(source):
        line = raw_line.strip()
        if not line.startswith(DIRECTIVE_PREFIX):
            continue

        command = line[len(DIRECTIVE_PREFIX) :].strip()
        if command.startswith("id "):
            ident = command[3:].strip()
        elif command.startswith("name "):
            name = command[5:].strip()
        elif command.startswith("description "):
            description = command[12:].strip()
        elif command.startswith("param "):
            params.append(_parse_param(command[6:], line))

    return TemplateMetadata(id=ident, name=name, description=description, params=params)


def _parse_param(body: str, line: str) -> ParamSpec:
    fields = [part.strip() for part in body.split("|")]
    if len(fields) < PARAM_FIELD_COUNT:
        raise InvalidParamDirective(line)

    key, label, low, high, step, default = fields[:PARAM_FIELD_COUNT]
    return ParamSpec(
        key=key,
        label=label,
        min=_to_number(low),
        max=_to_number(high),
        step=_to_number(step),
        default_value=_to_number(default),
    )


def _to_number(text: str) -> float:
    """Parse a plain decimal field; anything else, empty included, becomes NaN."""
    if not _DECIMAL.fullmatch(text):
        return math.nan
    return float(text)
