"""CONREC contouring after Paul Bourke's subroutine.

Each grid cell is split into four triangles meeting at the cell centre,
whose height is the mean of the corners. A triangle crossed by a contour
level contributes one segment whose ends are linear interpolations along
its edges. Points computed on an edge shared by two triangles are
bit-identical on both sides, so callers can join segments by exact
point equality.
"""

from __future__ import annotations

import math
from typing import Callable, Protocol, Sequence, runtime_checkable

import numpy as np

from vecplot.errors import PlotDataError

ContourPoint = tuple[float, float]
SegmentSink = Callable[[int, int, ContourPoint, ContourPoint, float], None]


@runtime_checkable
class ContourGrid(Protocol):
    def dims(self) -> tuple[int, int]:
        """Number of columns and rows."""
        ...

    def z(self, c: int, r: int) -> float:
        ...

    def x(self, c: int) -> float:
        ...

    def y(self, r: int) -> float:
        ...


class GridXYZ:
    """Grid over numpy arrays: ``z`` has shape (rows, cols)."""

    def __init__(self, z: np.ndarray, x: Sequence[float] | np.ndarray, y: Sequence[float] | np.ndarray) -> None:
        self.zs = np.asarray(z, dtype=np.float64)
        self.xs = np.asarray(x, dtype=np.float64).reshape(-1)
        self.ys = np.asarray(y, dtype=np.float64).reshape(-1)
        if self.zs.ndim != 2:
            raise PlotDataError(f"grid values must be 2-D, got shape {self.zs.shape}")
        rows, cols = self.zs.shape
        if self.xs.shape[0] != cols or self.ys.shape[0] != rows:
            raise PlotDataError(
                f"grid of {rows}x{cols} values needs {cols} x and {rows} y coordinates, "
                f"got {self.xs.shape[0]} and {self.ys.shape[0]}"
            )

    @classmethod
    def from_function(
        cls, f: Callable[[np.ndarray, np.ndarray], np.ndarray], x: Sequence[float], y: Sequence[float]
    ) -> "GridXYZ":
        xs = np.asarray(x, dtype=np.float64)
        ys = np.asarray(y, dtype=np.float64)
        xx, yy = np.meshgrid(xs, ys)
        return cls(f(xx, yy), xs, ys)

    def dims(self) -> tuple[int, int]:
        rows, cols = self.zs.shape
        return cols, rows

    def z(self, c: int, r: int) -> float:
        return float(self.zs[r, c])

    def x(self, c: int) -> float:
        return float(self.xs[c])

    def y(self, r: int) -> float:
        return float(self.ys[r])

    def min(self) -> float:
        return float(np.nanmin(self.zs))

    def max(self) -> float:
        return float(np.nanmax(self.zs))


# Triangle vertex classes (below, at, above) to segment shape.
_CASES = (
    ((0, 0, 8), (0, 2, 5), (7, 6, 9)),
    ((0, 3, 4), (1, 3, 1), (4, 3, 0)),
    ((9, 6, 7), (5, 2, 0), (8, 0, 0)),
)
# Corner offsets of vertices 1..4, counter-clockwise from (i, j).
_IM = (0, 1, 1, 0)
_JM = (0, 0, 1, 1)


def _sign(v: float) -> int:
    if v > 0:
        return 1
    if v < 0:
        return -1
    return 0


def conrec(grid: ContourGrid, levels: Sequence[float], emit: SegmentSink) -> None:
    """Call ``emit(i, j, p1, p2, z)`` for every contour segment in every cell.

    ``levels`` must be sorted ascending. Cells with a NaN corner are skipped.
    """
    if not levels:
        return
    cols, rows = grid.dims()
    lo, hi = levels[0], levels[-1]
    h = [0.0] * 5
    xh = [0.0] * 5
    yh = [0.0] * 5
    sh = [0] * 5

    for i in range(cols - 1):
        x0, x1 = grid.x(i), grid.x(i + 1)
        for j in range(rows - 1):
            y0, y1 = grid.y(j), grid.y(j + 1)
            corners = (grid.z(i, j), grid.z(i, j + 1), grid.z(i + 1, j), grid.z(i + 1, j + 1))
            if any(math.isnan(v) for v in corners):
                continue
            dmin = min(corners)
            dmax = max(corners)
            if dmax < lo or hi < dmin:
                continue

            for z in levels:
                if z < dmin or z > dmax:
                    continue
                for m in range(4, -1, -1):
                    if m > 0:
                        ci, cj = i + _IM[m - 1], j + _JM[m - 1]
                        h[m] = grid.z(ci, cj) - z
                        xh[m] = grid.x(ci)
                        yh[m] = grid.y(cj)
                    else:
                        h[0] = 0.25 * (h[1] + h[2] + h[3] + h[4])
                        xh[0] = 0.5 * (x0 + x1)
                        yh[0] = 0.5 * (y0 + y1)
                    sh[m] = _sign(h[m])

                def sect(a: int, b: int) -> ContourPoint:
                    return (
                        (h[b] * xh[a] - h[a] * xh[b]) / (h[b] - h[a]),
                        (h[b] * yh[a] - h[a] * yh[b]) / (h[b] - h[a]),
                    )

                for m in range(1, 5):
                    m1, m2 = m, 0
                    m3 = m + 1 if m != 4 else 1
                    case = _CASES[sh[m1] + 1][sh[m2] + 1][sh[m3] + 1]
                    if case == 0:
                        continue
                    if case == 1:
                        p1, p2 = (xh[m1], yh[m1]), (xh[m2], yh[m2])
                    elif case == 2:
                        p1, p2 = (xh[m2], yh[m2]), (xh[m3], yh[m3])
                    elif case == 3:
                        p1, p2 = (xh[m3], yh[m3]), (xh[m1], yh[m1])
                    elif case == 4:
                        p1, p2 = (xh[m1], yh[m1]), sect(m2, m3)
                    elif case == 5:
                        p1, p2 = (xh[m2], yh[m2]), sect(m3, m1)
                    elif case == 6:
                        p1, p2 = (xh[m3], yh[m3]), sect(m1, m2)
                    elif case == 7:
                        p1, p2 = sect(m1, m2), sect(m2, m3)
                    elif case == 8:
                        p1, p2 = sect(m2, m3), sect(m3, m1)
                    else:
                        p1, p2 = sect(m3, m1), sect(m1, m2)
                    emit(i, j, p1, p2, z)
