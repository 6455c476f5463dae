"""
Render settings loaded from an optional TOML file.

Example relineate.toml:

    [canvas]
    width = 1404
    height = 1872
    x_offset = 0.0

    [render]
    smooth = true
    background = "#ffffff"

    [palette]
    gray = "#808080"

    [pdf]
    page = 0
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import tomli

from .parser import PenColor
from .constants import REMARKABLE_HEIGHT, REMARKABLE_WIDTH


HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass(frozen=True)
class RenderConfig:
    width: float = REMARKABLE_WIDTH
    height: float = REMARKABLE_HEIGHT
    x_offset: float = 0.0
    smooth: bool = False
    background: Optional[str] = "#ffffff"
    palette: dict[PenColor, str] = field(default_factory=dict)
    page: int = 0

    def override(self, **changes: Any) -> RenderConfig:
        """Copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _number(section: dict, key: str, default: float, positive: bool = True) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    if positive and value <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return float(value)


def _color(key: str, value: Any) -> str:
    if not isinstance(value, str) or not HEX_COLOR.match(value):
        raise ConfigError(f"{key} must be a #rrggbb color, got {value!r}")
    return value.lower()


def parse_config(data: dict) -> RenderConfig:
    """Build a RenderConfig from decoded TOML."""
    canvas = data.get("canvas", {})
    render = data.get("render", {})
    pdf = data.get("pdf", {})

    smooth = render.get("smooth", False)
    if not isinstance(smooth, bool):
        raise ConfigError(f"smooth must be true or false, got {smooth!r}")

    background = render.get("background", "#ffffff")
    if background in ("", "none"):
        background = None
    else:
        background = _color("background", background)

    palette = {}
    for name, value in data.get("palette", {}).items():
        try:
            color = PenColor[name.upper()]
        except KeyError:
            raise ConfigError(f"Unknown palette color {name!r}") from None
        palette[color] = _color(f"palette.{name}", value)

    page = pdf.get("page", 0)
    if isinstance(page, bool) or not isinstance(page, int) or page < 0:
        raise ConfigError(f"page must be a non-negative integer, got {page!r}")

    return RenderConfig(
        width=_number(canvas, "width", REMARKABLE_WIDTH),
        height=_number(canvas, "height", REMARKABLE_HEIGHT),
        x_offset=_number(canvas, "x_offset", 0.0, positive=False),
        smooth=smooth,
        background=background,
        palette=palette,
        page=page,
    )


def load_config(config_path: Path) -> RenderConfig:
    """Parse relineate.toml."""
    with open(config_path, "rb") as f:
        try:
            data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"{config_path}: {e}") from e
    return parse_config(data)
