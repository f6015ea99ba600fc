from __future__ import annotations

import copy
import math
from typing import Protocol, Sequence, runtime_checkable

from vecplot.errors import GamutClamp, InputRangeError, NaNValue, Overflow, PlotError, Underflow
from vecplot.vg.canvas import RGBA, to_rgba


@runtime_checkable
class ColorMap(Protocol):
    min: float
    max: float
    alpha: float

    def at(self, v: float) -> RGBA:
        ...

    def try_at(self, v: float) -> tuple[RGBA | None, PlotError | None]:
        ...

    def palette(self, n: int) -> list[RGBA]:
        ...


def check_range(vmin: float, vmax: float, v: float) -> None:
    """Raise the error kind for evaluating a map spanning [vmin, vmax] at ``v``."""
    if vmax == vmin:
        raise InputRangeError(f"color map max == min == {vmax:g}")
    if vmin > vmax:
        raise InputRangeError(f"color map max ({vmax:g}) < min ({vmin:g})")
    if v < vmin:
        raise Underflow(f"value {v:g} < color map minimum {vmin:g}")
    if v > vmax:
        raise Overflow(f"value {v:g} > color map maximum {vmax:g}")
    if math.isnan(v):
        raise NaNValue("color map evaluated at NaN")


def search_scalars(scalars: Sequence[float], t: float) -> int:
    """Index of the first anchor at or above ``t``."""
    for i, s in enumerate(scalars):
        if t <= s:
            return i
    return len(scalars)


def in_unit_range(v: float) -> bool:
    return 0.0 <= v <= 1.0


def unit_to_byte(v: float) -> int:
    return int(round(min(1.0, max(0.0, v)) * 255))


class RangedColorMap:
    """Range, alpha and palette extraction shared by the concrete maps."""

    def __init__(self) -> None:
        self._min = 0.0
        self._max = 0.0
        self._alpha = 1.0

    @property
    def min(self) -> float:
        return self._min

    @min.setter
    def min(self, v: float) -> None:
        self._min = float(v)

    @property
    def max(self) -> float:
        return self._max

    @max.setter
    def max(self, v: float) -> None:
        self._max = float(v)

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, a: float) -> None:
        if not in_unit_range(a):
            raise ValueError(f"invalid alpha: {a!r}")
        self._alpha = float(a)

    def at(self, v: float) -> RGBA:
        raise NotImplementedError

    def try_at(self, v: float) -> tuple[RGBA | None, PlotError | None]:
        """Color at ``v`` plus the error ``at`` would raise.

        An out-of-gamut color is still returned, clamped, next to its
        :class:`GamutClamp`; other errors come back with no color.
        """
        try:
            return self.at(v), None
        except GamutClamp as exc:
            return exc.color, exc
        except PlotError as exc:
            return None, exc

    def palette(self, n: int) -> list[RGBA]:
        """``n`` colors equally spaced over [min, max]; an unset range means [0, 1]."""
        if n < 1:
            raise ValueError("palette size must be >= 1")
        cm = self
        if self.max == 0 and self.min == 0:
            cm = copy.copy(self)
            cm.min = 0.0
            cm.max = 1.0
        if n == 1:
            return [cm.at(cm.min)]
        delta = (cm.max - cm.min) / (n - 1)
        out = []
        for i in range(n):
            v = cm.max if i == n - 1 else cm.min + delta * i
            out.append(cm.at(v))
        return out


class LinearColorMap(RangedColorMap):
    """Per-channel sRGB interpolation between equally spaced anchor colors."""

    def __init__(self, colors: Sequence[tuple[int, ...]]) -> None:
        super().__init__()
        if not colors:
            raise ValueError("LinearColorMap requires at least one color")
        self.colors = [to_rgba(c) for c in colors]
        n = len(self.colors)
        self.scalars = [i / (n - 1) for i in range(n)] if n > 1 else [0.0]

    def at(self, v: float) -> RGBA:
        check_range(self.min, self.max, v)
        t = (v - self.min) / (self.max - self.min)
        i = search_scalars(self.scalars, t)
        a = unit_to_byte(self.alpha)
        if i == 0:
            r, g, b, _ = self.colors[0]
            return (r, g, b, a)
        c1, c2 = self.colors[i - 1], self.colors[i]
        frac = (t - self.scalars[i - 1]) / (self.scalars[i] - self.scalars[i - 1])
        r, g, b = (int(round(frac * (c2[k] - c1[k]) + c1[k])) for k in range(3))
        return (r, g, b, a)


def from_palette(colors: Sequence[tuple[int, ...]]) -> LinearColorMap:
    return LinearColorMap(colors)
