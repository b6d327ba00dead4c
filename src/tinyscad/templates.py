"""Parameterized templates: source, metadata and a parsed program, loaded once."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from tinyscad.config import EngineConfig
from tinyscad.errors import TemplateError
from tinyscad.evaluator import evaluate
from tinyscad.metadata import TemplateMetadata, parse_metadata
from tinyscad.parser import parse_program
from tinyscad.syntax import Program
from tinyscad.tessellation import Triangle

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".scad"
DEFAULT_TEMPLATE_ID = "brick"


@dataclass(frozen=True)
class Template:
    id: str
    source: str
    metadata: TemplateMetadata
    program: Program

    def default_params(self) -> dict[str, float]:
        """Map each parameter key to its default, in declaration order."""
        return {p.key: p.default_value for p in self.metadata.params}

    def resolve_params(
        self, overrides: Mapping[str, float] | None = None, clamp: bool = True
    ) -> dict[str, float]:
        """Overlay ``overrides`` on the defaults.

        Raises:
            TemplateError: If an override names a parameter the template
                does not declare.
        """
        params = self.default_params()
        limits = {p.key: (p.min, p.max) for p in self.metadata.params}

        for key, value in (overrides or {}).items():
            if key not in params:
                raise TemplateError(
                    f"Template {self.id!r} has no parameter {key!r} "
                    f"(known: {', '.join(params) or 'none'})"
                )
            value = float(value)
            if clamp:
                value = _clamp(value, *limits[key])
            params[key] = value
        return params

    def render(
        self,
        overrides: Mapping[str, float] | None = None,
        config: EngineConfig | None = None,
        clamp: bool = True,
    ) -> list[Triangle]:
        params = self.resolve_params(overrides, clamp=clamp)
        logger.debug("Rendering template %r with %s", self.id, params)
        return evaluate(self.program, params, config)

    def resolved_source(self, overrides: Mapping[str, float] | None = None) -> str:
        return build_resolved_source(self.source, self.resolve_params(overrides))


def load_template(source: str | Path, fallback_id: str | None = None) -> Template:
    """Load a template from raw text or a ``.scad`` file path.

    For a path the fallback id is the file stem.

    Raises:
        TemplateError: If the file cannot be read.
        TinyScadError: Any lex/parse/metadata error in the template itself.
    """
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Cannot read template: {e}") from e
        if fallback_id is None:
            fallback_id = source.stem
    else:
        text = source

    metadata = parse_metadata(text, fallback_id or DEFAULT_TEMPLATE_ID)
    program = parse_program(text)
    logger.info("Loaded template %r (%d params)", metadata.id, len(metadata.params))
    return Template(id=metadata.id, source=text, metadata=metadata, program=program)


def load_templates(directory: Path) -> list[Template]:
    """Load every ``*.scad`` file in ``directory``, sorted by file name."""
    if not directory.is_dir():
        raise TemplateError(f"Template directory not found: {directory}")
    return [load_template(path) for path in sorted(directory.glob(f"*{TEMPLATE_SUFFIX}"))]


def build_resolved_source(source: str, params: Mapping[str, float]) -> str:
    """Prefix ``source`` with one ``name = value;`` line per parameter.

    The result is a standalone file that full CAD tools can open as-is.
    """
    head = "\n".join(f"{name} = {format_number(value)};" for name, value in params.items())
    return f"{head}\n\n{source.strip()}\n"


def format_number(value: float) -> str:
    """Integral values without a decimal point, others to at most 6 decimals.

    Always fixed-point: the tokenizer has no exponent syntax.
    """
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _clamp(value: float, low: float, high: float) -> float:
    if math.isfinite(low) and value < low:
        return low
    if math.isfinite(high) and value > high:
        return high
    return value
