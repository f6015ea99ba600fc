from __future__ import annotations

import colorsys
from dataclasses import dataclass
import math
from typing import Sequence

from vecplot.palette.colormap import RangedColorMap, unit_to_byte
from vecplot.vg.canvas import RGBA

# Hues in [0, 1].
RED = 0 / 6
YELLOW = 1 / 6
GREEN = 2 / 6
CYAN = 3 / 6
BLUE = 4 / 6
MAGENTA = 5 / 6


def complement(hue: float) -> float:
    return math.fmod(hue + 0.5, 1.0)


@dataclass(frozen=True)
class HSVA:
    h: float
    s: float
    v: float
    a: float = 1.0

    def rgba(self) -> RGBA:
        r, g, b = colorsys.hsv_to_rgb(self.h % 1.0, self.s, self.v)
        return (unit_to_byte(r), unit_to_byte(g), unit_to_byte(b), unit_to_byte(self.a))


def rainbow(colors: int, start: float, end: float, sat: float, val: float, alpha: float) -> list[RGBA]:
    """``colors`` hues evenly spread from ``start`` to ``end`` at fixed saturation and value."""
    if colors < 1:
        raise ValueError("colors must be >= 1")
    hd = (end - start) / (colors - 1) if colors > 1 else 0.0
    return [HSVA(start + i * hd, sat, val, alpha).rgba() for i in range(colors)]


def heat(colors: int, alpha: float) -> list[RGBA]:
    """Red through yellow, finishing with a quarter of increasingly pale yellows."""
    if colors < 1:
        raise ValueError("colors must be >= 1")
    j = colors // 4
    i = colors - j
    hd = (YELLOW - RED) / (i - 1) if i > 1 else 0.0
    out = [HSVA(RED + k * hd, 1.0, 1.0, alpha).rgba() for k in range(i)]
    if j == 0:
        return out
    start, end = 1 - 1 / (2 * j), 1 / (2 * j)
    sd = (end - start) / (j - 1) if j > 1 else 0.0
    out.extend(HSVA(YELLOW, start + k * sd, 1.0, alpha).rgba() for k in range(j))
    return out


def radial(colors: int, start: float, end: float, alpha: float) -> list[RGBA]:
    """Diverging palette from hue ``start`` through white to hue ``end``."""
    if colors < 1:
        raise ValueError("colors must be >= 1")
    h = colors // 2
    out: list[RGBA] = [(255, 255, 255, unit_to_byte(alpha))] * colors
    ds = 0.5 / h if h else 0.0
    for i in range(h):
        s = 0.5 - i * ds
        out[i] = HSVA(start, s, 1.0, alpha).rgba()
        out[colors - 1 - i] = HSVA(end, s, 1.0, alpha).rgba()
    return out


def critical_index(colors: Sequence[RGBA]) -> tuple[int, int]:
    """Indices of the median color(s) of a diverging palette."""
    n = len(colors)
    return (n - 1) // 2, n // 2


class ReversedColorMap(RangedColorMap):
    """Evaluates the wrapped map with its range flipped end for end."""

    def __init__(self, base: RangedColorMap) -> None:
        self.base = base

    @property
    def min(self) -> float:
        return self.base.min

    @min.setter
    def min(self, v: float) -> None:
        self.base.min = v

    @property
    def max(self) -> float:
        return self.base.max

    @max.setter
    def max(self, v: float) -> None:
        self.base.max = v

    @property
    def alpha(self) -> float:
        return self.base.alpha

    @alpha.setter
    def alpha(self, a: float) -> None:
        self.base.alpha = a

    def at(self, v: float) -> RGBA:
        return self.base.at(self.base.max - (v - self.base.min))

    def palette(self, n: int) -> list[RGBA]:
        return list(reversed(self.base.palette(n)))


def reverse(p: RangedColorMap | Sequence[RGBA]):
    """Reverse a palette or a color map."""
    if isinstance(p, ReversedColorMap):
        return p.base
    if isinstance(p, RangedColorMap):
        return ReversedColorMap(p)
    return list(reversed(p))
