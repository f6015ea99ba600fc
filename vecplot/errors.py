from __future__ import annotations


class PlotError(Exception):
    """Base class for every error raised by vecplot."""


class InputRangeError(PlotError):
    pass


class DomainError(PlotError):
    pass


class Underflow(PlotError):
    pass


class Overflow(PlotError):
    pass


class NaNValue(PlotError):
    pass


class UnsupportedFormat(PlotError):
    pass


class ContourStructural(PlotError):
    pass


class GamutClamp(PlotError):
    """Raised when a color falls outside sRGB; ``color`` holds the clamped result."""

    def __init__(self, value: float, color: tuple[int, int, int, int] | None = None) -> None:
        super().__init__(f"colormap out of gamut at {value!r}")
        self.value = value
        self.color = color


class StackUnderflow(PlotError):
    pass


class PlotDataError(PlotError, ValueError):
    pass


class ConfigError(PlotError, ValueError):
    pass
