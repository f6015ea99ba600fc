from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle
from vecplot.vg.geom import Point

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class GlyphBoxes:
    """Outlines every glyph box of the plot; a layout debugging aid."""

    line_style: LineStyle = LineStyle(color=(255, 0, 0, 255), width=0.25)

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        for b in plt.glyph_boxes():
            size = b.size()
            x = c.x(b.x) + b.rect.min.x
            y = c.y(b.y) + b.rect.min.y
            c.stroke_lines(
                self.line_style,
                [
                    Point(x, y),
                    Point(x + size.x, y),
                    Point(x + size.x, y + size.y),
                    Point(x, y + size.y),
                    Point(x, y),
                ],
            )
