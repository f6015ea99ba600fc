from vecplot.axis import Axis, AxisLabel, AxisTicks, HorizontalAxis, VerticalAxis
from vecplot.config import PlotConfig, config_from_mapping, load_config
from vecplot.errors import (
    ConfigError,
    ContourStructural,
    DomainError,
    GamutClamp,
    InputRangeError,
    NaNValue,
    Overflow,
    PlotDataError,
    PlotError,
    StackUnderflow,
    Underflow,
    UnsupportedFormat,
)
from vecplot.glyphbox import DataRanger, GlyphBox, GlyphBoxer, Plotter, Thumbnailer
from vecplot.legend import Legend
from vecplot.plot import Plot, Title, align
from vecplot.scales import InvertedScale, LinearScale, LogScale
from vecplot.ticks import ConstantTicks, DefaultTicks, LogTicks, TalbotTicks, Tick, TimeTicks

__all__ = [
    "Axis",
    "AxisLabel",
    "AxisTicks",
    "ConfigError",
    "ConstantTicks",
    "ContourStructural",
    "DataRanger",
    "DefaultTicks",
    "DomainError",
    "GamutClamp",
    "GlyphBox",
    "GlyphBoxer",
    "HorizontalAxis",
    "InputRangeError",
    "InvertedScale",
    "Legend",
    "LinearScale",
    "LogScale",
    "LogTicks",
    "NaNValue",
    "Overflow",
    "Plot",
    "PlotConfig",
    "PlotDataError",
    "PlotError",
    "Plotter",
    "StackUnderflow",
    "TalbotTicks",
    "Thumbnailer",
    "Tick",
    "TimeTicks",
    "Title",
    "Underflow",
    "UnsupportedFormat",
    "VerticalAxis",
    "align",
    "config_from_mapping",
    "load_config",
]
