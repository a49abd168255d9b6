"""Global configuration for a GIF stream."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .errors import ConfigurationError
from .frame import MAX_DIMENSION, Frame, validate_color_table


@dataclass(frozen=True)
class GlobalConfig:
    """Canvas size and global color table.

    A ``color_model`` of None or an empty color table means every frame
    carries its own table. The zero value ``GlobalConfig()`` means the canvas
    size is taken from the first frame's bounds.
    """

    width: int = 0
    height: int = 0
    color_model: Any = None

    @property
    def is_zero(self) -> bool:
        return self.width == 0 and self.height == 0 and self.color_model is None

    @property
    def color_table(self) -> Optional[tuple]:
        """The global color table, or None when there is none."""
        if self.color_model:
            return tuple(self.color_model)
        return None


@dataclass(frozen=True)
class StreamOptions:
    """Options for a stream writer.

    Attributes:
        loop_count: 0 loops forever, -1 plays once, N loops N + 1 times.
        config: Canvas size and global color table.
        background_index: Global color table index used by
            ``Disposal.BACKGROUND``.
    """

    loop_count: int = 0
    config: GlobalConfig = field(default_factory=GlobalConfig)
    background_index: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StreamOptions":
        """Build options from plain data, e.g. a parsed JSON or YAML document.

        Recognised keys: ``width``, ``height``, ``palette`` (alias
        ``color_model``), ``loop_count`` and ``background_index``.
        """
        known = {"width", "height", "palette", "color_model", "loop_count", "background_index"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"unknown option(s): {', '.join(sorted(unknown))}")
        if "palette" in data and "color_model" in data:
            raise ConfigurationError("give either 'palette' or 'color_model', not both")

        color_model = data.get("palette", data.get("color_model"))
        if isinstance(color_model, list):
            color_model = [tuple(c) if isinstance(c, list) else c for c in color_model]

        config = GlobalConfig(
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
            color_model=color_model,
        )
        return cls(
            loop_count=int(data.get("loop_count", 0)),
            config=config,
            background_index=int(data.get("background_index", 0)),
        )


def load_options(path: Union[str, Path]) -> StreamOptions:
    """Load stream options from a .json, .yaml or .yml file."""
    path = Path(path)

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError("YAML support requires PyYAML. Install with: pip install pyyaml")
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    return StreamOptions.from_dict(data)


def resolve_config(
    config: GlobalConfig,
    first_frame: Frame,
    loop_count: int,
    background_index: int,
) -> GlobalConfig:
    """Validate the stream configuration and fill in what the first frame implies.

    Raises ConfigurationError without side effects when anything cannot be
    encoded.
    """
    if config.is_zero:
        _, _, right, bottom = first_frame.bounds
        config = replace(config, width=right, height=bottom)
    elif config.color_model is not None and not isinstance(config.color_model, (list, tuple)):
        raise ConfigurationError("GIF color model must be a color table")

    if not (0 <= config.width <= MAX_DIMENSION and 0 <= config.height <= MAX_DIMENSION):
        raise ConfigurationError(
            f"canvas size {config.width}x{config.height} is outside 0..{MAX_DIMENSION}"
        )
    if config.color_model:
        try:
            table = validate_color_table(config.color_model)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        config = replace(config, color_model=table)

    if not -1 <= loop_count <= 0xFFFF:
        raise ConfigurationError(f"loop count must be in range -1..65535, got {loop_count}")
    if not 0 <= background_index <= 0xFF:
        raise ConfigurationError(f"background index must be in range 0..255, got {background_index}")
    return config


