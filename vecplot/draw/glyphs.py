from __future__ import annotations

import math
from typing import TYPE_CHECKING

from vecplot.draw.styles import GlyphStyle, LineStyle
from vecplot.vg.geom import Point
from vecplot.vg.path import Path

if TYPE_CHECKING:
    from vecplot.draw.canvas import BoundedCanvas


COS_PI_OVER_4 = 0.707106781202420
SIN_PI_OVER_6 = 0.500000000025921
COS_PI_OVER_6 = 0.866025403769473

GLYPH_LINE_WIDTH = 0.5


def _outline(c: "BoundedCanvas", sty: GlyphStyle) -> None:
    c.set_line_style(LineStyle(color=sty.color, width=GLYPH_LINE_WIDTH))


def _square_half_side(radius: float) -> float:
    return (radius - radius * COS_PI_OVER_4) / 2 + radius * COS_PI_OVER_4


def _square_path(pt: Point, x: float) -> Path:
    p = Path()
    p.move(Point(pt.x - x, pt.y - x))
    p.line(Point(pt.x + x, pt.y - x))
    p.line(Point(pt.x + x, pt.y + x))
    p.line(Point(pt.x - x, pt.y + x))
    p.close()
    return p


def _triangle_path(pt: Point, radius: float) -> Path:
    r = radius + (radius - radius * SIN_PI_OVER_6) / 2
    p = Path()
    p.move(Point(pt.x, pt.y + r))
    p.line(Point(pt.x - r * COS_PI_OVER_6, pt.y - r * SIN_PI_OVER_6))
    p.line(Point(pt.x + r * COS_PI_OVER_6, pt.y - r * SIN_PI_OVER_6))
    p.close()
    return p


def _circle_path(pt: Point, radius: float) -> Path:
    p = Path()
    p.move(Point(pt.x + radius, pt.y))
    p.arc(pt, radius, 0.0, 2 * math.pi)
    p.close()
    return p


class CircleGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        c.fill(_circle_path(pt, sty.radius))


class RingGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        _outline(c, sty)
        c.stroke(_circle_path(pt, sty.radius))


class SquareGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        _outline(c, sty)
        c.stroke(_square_path(pt, _square_half_side(sty.radius)))


class BoxGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        c.fill(_square_path(pt, _square_half_side(sty.radius)))


class TriangleGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        _outline(c, sty)
        c.stroke(_triangle_path(pt, sty.radius))


class PyramidGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        c.fill(_triangle_path(pt, sty.radius))


class PlusGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        _outline(c, sty)
        r = sty.radius
        p = Path()
        p.move(Point(pt.x, pt.y + r))
        p.line(Point(pt.x, pt.y - r))
        c.stroke(p)
        p = Path()
        p.move(Point(pt.x - r, pt.y))
        p.line(Point(pt.x + r, pt.y))
        c.stroke(p)


class CrossGlyph:
    def draw_glyph(self, c: "BoundedCanvas", sty: GlyphStyle, pt: Point) -> None:
        _outline(c, sty)
        r = sty.radius * COS_PI_OVER_4
        p = Path()
        p.move(Point(pt.x - r, pt.y - r))
        p.line(Point(pt.x + r, pt.y + r))
        c.stroke(p)
        p = Path()
        p.move(Point(pt.x - r, pt.y + r))
        p.line(Point(pt.x + r, pt.y - r))
        c.stroke(p)


GLYPH_SHAPES = {
    "circle": CircleGlyph(),
    "ring": RingGlyph(),
    "square": SquareGlyph(),
    "box": BoxGlyph(),
    "triangle": TriangleGlyph(),
    "pyramid": PyramidGlyph(),
    "plus": PlusGlyph(),
    "cross": CrossGlyph(),
}
