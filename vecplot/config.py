from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING, Any, Mapping

from vecplot.errors import ConfigError
from vecplot.scales import scale_by_name
from vecplot.ticks import ticker_by_name
from vecplot.vg.canvas import RGBA, WHITE
from vecplot.vg.geom import Length, parse_length

if TYPE_CHECKING:
    from vecplot.plot import Plot


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisConfig:
    padding: Length = 5.0
    scale: str = "linear"
    marker: str = "default"


@dataclass(frozen=True)
class LegendConfig:
    top: bool = False
    left: bool = False
    x_offs: Length = 0.0
    y_offs: Length = 0.0
    padding: Length = 0.0
    thumbnail_width: Length = 20.0


@dataclass(frozen=True)
class PlotConfig:
    """Plot construction options, usually loaded from a TOML file.

    ``[title]``, ``[x]``, ``[y]`` and ``[legend]`` tables map onto the nested
    configs; ``background_color`` is a ``#rrggbb[aa]`` string or an RGB(A)
    list, or ``"none"`` for no background fill.
    """

    background_color: RGBA | None = WHITE
    title_text: str = ""
    title_padding: Length = 5.0
    x: AxisConfig = field(default_factory=AxisConfig)
    y: AxisConfig = field(default_factory=AxisConfig)
    legend: LegendConfig = field(default_factory=LegendConfig)

    def apply(self, plot: "Plot") -> None:
        plot.background = self.background_color
        plot.title.text = self.title_text
        plot.title.padding = self.title_padding
        for axis, cfg in ((plot.x, self.x), (plot.y, self.y)):
            axis.padding = cfg.padding
            axis.scale = scale_by_name(cfg.scale)
            axis.tick.marker = ticker_by_name(cfg.marker)
        lg = plot.legend
        lg.top = self.legend.top
        lg.left = self.legend.left
        lg.x_offs = self.legend.x_offs
        lg.y_offs = self.legend.y_offs
        lg.padding = self.legend.padding
        lg.thumbnail_width = self.legend.thumbnail_width


def load_config(path: str | Path) -> PlotConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"plot config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid plot config {config_path}: {exc}") from exc
    LOGGER.debug("loaded plot config from %s", config_path)
    return config_from_mapping(raw)


def config_from_mapping(raw: Mapping[str, Any]) -> PlotConfig:
    title = _coerce_table(raw.get("title", {}), "title")
    legend = _coerce_table(raw.get("legend", {}), "legend")
    return PlotConfig(
        background_color=_coerce_color(raw.get("background_color", WHITE), "background_color"),
        title_text=_coerce_str(title.get("text", ""), "title.text"),
        title_padding=_coerce_length(title.get("padding", 5.0), "title.padding"),
        x=_axis_config(_coerce_table(raw.get("x", {}), "x"), "x"),
        y=_axis_config(_coerce_table(raw.get("y", {}), "y"), "y"),
        legend=LegendConfig(
            top=_coerce_bool(legend.get("top", False), "legend.top"),
            left=_coerce_bool(legend.get("left", False), "legend.left"),
            x_offs=_coerce_length(legend.get("x_offs", 0.0), "legend.x_offs"),
            y_offs=_coerce_length(legend.get("y_offs", 0.0), "legend.y_offs"),
            padding=_coerce_length(legend.get("padding", 0.0), "legend.padding"),
            thumbnail_width=_coerce_length(legend.get("thumbnail_width", 20.0), "legend.thumbnail_width"),
        ),
    )


def _axis_config(raw: Mapping[str, Any], name: str) -> AxisConfig:
    scale = _coerce_str(raw.get("scale", "linear"), f"{name}.scale")
    marker = _coerce_str(raw.get("marker", "default"), f"{name}.marker")
    # Resolve now so a bad name fails at load time rather than at draw time.
    try:
        scale_by_name(scale)
        ticker_by_name(marker)
    except ValueError as exc:
        raise ConfigError(f"{name}: {exc}") from exc
    return AxisConfig(
        padding=_coerce_length(raw.get("padding", 5.0), f"{name}.padding"),
        scale=scale,
        marker=marker,
    )


def _coerce_table(value: object, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{field_name} must be a table")
    return value


def _coerce_str(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string")
    return value


def _coerce_bool(value: object, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be true or false")
    return value


def _coerce_length(value: object, field_name: str) -> Length:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a length")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return parse_length(value)
        except ValueError as exc:
            raise ConfigError(f"{field_name}: {exc}") from exc
    raise ConfigError(f"{field_name} must be a number or a length string")


def _coerce_color(value: object, field_name: str) -> RGBA | None:
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "none":
            return None
        if text.startswith("#") and len(text) in (7, 9):
            try:
                channels = [int(text[i : i + 2], 16) for i in range(1, len(text), 2)]
            except ValueError as exc:
                raise ConfigError(f"{field_name}: invalid hex color {value!r}") from exc
            if len(channels) == 3:
                channels.append(255)
            return (channels[0], channels[1], channels[2], channels[3])
        raise ConfigError(f"{field_name}: expected #rrggbb, #rrggbbaa or none, got {value!r}")
    if isinstance(value, (list, tuple)) and len(value) in (3, 4):
        out = []
        for ch in value:
            if isinstance(ch, bool) or not isinstance(ch, int) or not 0 <= ch <= 255:
                raise ConfigError(f"{field_name} channels must be integers in [0, 255]")
            out.append(ch)
        if len(out) == 3:
            out.append(255)
        return (out[0], out[1], out[2], out[3])
    raise ConfigError(f"{field_name} must be a color string or an RGB(A) list")
