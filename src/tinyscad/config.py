"""Engine configuration: tessellation defaults and evaluation limits."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from tinyscad.errors import ConfigError


class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    default_segments: int = Field(24, ge=3)
    min_segments: int = Field(6, ge=3)
    loop_tolerance: float = Field(1e-9, ge=0)
    # None keeps the unbounded reference behavior.
    max_loop_iterations: int | None = Field(None, gt=0)


DEFAULT_CONFIG = EngineConfig()


def load_config(source: Path) -> EngineConfig:
    """Load an :class:`EngineConfig` from a YAML file.

    An empty file yields the defaults.

    Raises:
        ConfigError: If the file is unreadable, not a YAML mapping, or has
            unknown/invalid keys.
    """
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}") from e

    yml = YAML(typ="safe")
    yml.allow_duplicate_keys = False
    try:
        data = yml.load(text)
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in config: {e}") from e

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config top-level YAML value must be a mapping")

    try:
        return EngineConfig(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Config validation failed:\n{e}") from e
