from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from vecplot.draw.glyphs import RingGlyph
from vecplot.draw.styles import GlyphStyle, LineStyle
from vecplot.errors import NaNValue, PlotDataError

DEFAULT_LINE_STYLE = LineStyle(width=1.0)
DEFAULT_GLYPH_STYLE = GlyphStyle(radius=2.5, shape=RingGlyph())


def _check_finite(arr: np.ndarray, what: str) -> np.ndarray:
    if not np.all(np.isfinite(arr)):
        raise NaNValue(f"{what} contains NaN or infinite values")
    return arr


class XYs:
    """Copied, validated (x, y) pairs held as an ``(n, 2)`` float array."""

    def __init__(self, points: Iterable[Sequence[float]] | np.ndarray) -> None:
        arr = np.asarray(points, dtype=np.float64)
        if arr.size == 0:
            arr = arr.reshape(0, 2)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise PlotDataError(f"expected (n, 2) points, got shape {arr.shape}")
        self.data = _check_finite(arr.copy(), "points")

    @classmethod
    def from_columns(cls, x: Sequence[float] | np.ndarray, y: Sequence[float] | np.ndarray) -> "XYs":
        xs = np.asarray(x, dtype=np.float64).reshape(-1)
        ys = np.asarray(y, dtype=np.float64).reshape(-1)
        if xs.shape != ys.shape:
            raise PlotDataError(f"x and y lengths differ: {xs.shape[0]} != {ys.shape[0]}")
        return cls(np.column_stack([xs, ys]))

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def xy(self, i: int) -> tuple[float, float]:
        return float(self.data[i, 0]), float(self.data[i, 1])

    @property
    def x(self) -> np.ndarray:
        return self.data[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.data[:, 1]


class Values:
    """Copied, validated one-dimensional values."""

    def __init__(self, values: Iterable[float] | np.ndarray) -> None:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        self.data = _check_finite(arr.copy(), "values")

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def __getitem__(self, i: int) -> float:
        return float(self.data[i])


def xy_range(xys: XYs) -> tuple[float, float, float, float]:
    """(xmin, xmax, ymin, ymax); an empty set gives an inverted infinite range."""
    if len(xys) == 0:
        return np.inf, -np.inf, np.inf, -np.inf
    return float(xys.x.min()), float(xys.x.max()), float(xys.y.min()), float(xys.y.max())
