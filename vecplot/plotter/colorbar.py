from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from vecplot.draw.canvas import BoundedCanvas
from vecplot.errors import InputRangeError
from vecplot.palette.colormap import ColorMap
from vecplot.vg.geom import Point, Rectangle

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class ColorBar:
    """Legend strip for a color map, drawn as an image over [min, max].

    Horizontal bars span the map range on x and [0, 1] on y; vertical bars
    swap the axes. ``colors`` of 0 means one color per point of bar length.
    """

    color_map: ColorMap
    vertical: bool = False
    colors: int = 0

    def _check(self) -> None:
        if self.color_map.max == self.color_map.min:
            raise InputRangeError(f"color bar map max == min == {self.color_map.max:g}")

    def _count(self, c: BoundedCanvas) -> int:
        if self.colors > 0:
            return self.colors
        size = c.size()
        return max(1, int(size.y if self.vertical else size.x))

    def image(self, n: int) -> np.ndarray:
        """RGBA pixels for ``n`` colors, low values at the left or bottom."""
        pixels = np.asarray(self.color_map.palette(n), dtype=np.uint8)
        if self.vertical:
            # Image rows run top to bottom.
            return pixels[::-1].reshape(n, 1, 4)
        return pixels.reshape(1, n, 4)

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        self._check()
        trx, try_ = plt.transforms(c)
        lo, hi = self.color_map.min, self.color_map.max
        if self.vertical:
            rect = Rectangle(Point(trx(0), try_(lo)), Point(trx(1), try_(hi)))
        else:
            rect = Rectangle(Point(trx(lo), try_(0)), Point(trx(hi), try_(1)))
        c.draw_image(rect, self.image(self._count(c)))

    def data_range(self) -> tuple[float, float, float, float]:
        self._check()
        if self.vertical:
            return 0.0, 1.0, self.color_map.min, self.color_map.max
        return self.color_map.min, self.color_map.max, 0.0, 1.0
