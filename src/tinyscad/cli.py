"""Click CLI entry point for the tinyscad engine."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from tinyscad import __version__
from tinyscad.config import EngineConfig, load_config
from tinyscad.errors import TinyScadError
from tinyscad.inspection import inspect_template, render_text
from tinyscad.stl import write_ascii_stl
from tinyscad.templates import load_template

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]

_define_option = click.option(
    "-D",
    "--define",
    "defines",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override a template parameter. May be repeated.",
)


def _parse_defines(defines: tuple[str, ...]) -> dict[str, float]:
    """Parse repeated ``-D key=value`` options into a parameter mapping."""
    params: dict[str, float] = {}
    for item in defines:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.UsageError(f"Invalid parameter override {item!r}, expected KEY=VALUE")
        try:
            params[key] = float(raw)
        except ValueError:
            raise click.UsageError(f"Parameter {key!r} must be numeric, got {raw.strip()!r}")
    return params


def _config(ctx: click.Context) -> EngineConfig | None:
    return ctx.obj.get("config") if ctx.obj else None


@click.group()
@click.version_option(version=__version__, prog_name="tinyscad")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with engine settings (segments, loop limits).",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None) -> None:
    """tinyscad: parameterized solid templates to printable meshes."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    if config_path is not None:
        try:
            ctx.obj["config"] = load_config(config_path)
        except TinyScadError as e:
            raise click.ClickException(str(e))
        logger.info("Using engine config from %s", config_path)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output STL path. Defaults to the input name with .stl extension.",
)
@_define_option
@click.option("--name", "solid_name", default=None, help="Solid name. Defaults to the template id.")
@click.option(
    "--no-clamp",
    is_flag=True,
    default=False,
    help="Do not clamp parameter overrides to their declared range.",
)
@click.pass_context
def export(
    ctx: click.Context,
    input_file: Path,
    output: Path | None,
    defines: tuple[str, ...] = (),
    solid_name: str | None = None,
    no_clamp: bool = False,
) -> None:
    """Evaluate a template and write an ASCII STL file."""
    overrides = _parse_defines(defines)
    if output is None:
        output = input_file.with_suffix(".stl")

    try:
        template = load_template(input_file)
        triangles = template.render(overrides, config=_config(ctx), clamp=not no_clamp)
        write_ascii_stl(triangles, output, solid_name or template.id)
    except TinyScadError as e:
        raise click.ClickException(str(e))
    click.echo(f"Exported: {output} ({len(triangles)} triangles)")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_define_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Inspection output format.",
)
@click.pass_context
def inspect(
    ctx: click.Context,
    input_file: Path,
    defines: tuple[str, ...] = (),
    output_format: str = "text",
) -> None:
    """Show template metadata, triangle count and bounds without exporting."""
    overrides = _parse_defines(defines)
    try:
        template = load_template(input_file)
        payload = inspect_template(template, overrides, config=_config(ctx))
    except TinyScadError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(render_text(payload), nl=False)


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_define_option
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the resolved source to this file instead of stdout.",
)
def resolve(input_file: Path, defines: tuple[str, ...] = (), output: Path | None = None) -> None:
    """Print the template source with parameter values prepended."""
    overrides = _parse_defines(defines)
    try:
        text = load_template(input_file).resolved_source(overrides)
    except TinyScadError as e:
        raise click.ClickException(str(e))

    if output is None:
        click.echo(text, nl=False)
        return
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot write {output}: {e}") from e
    click.echo(f"Resolved: {output}")
