from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Sequence

from vecplot.draw import clip
from vecplot.draw.styles import GlyphStyle, LineStyle, TextStyle
from vecplot.vg.canvas import RGBA, Canvas
from vecplot.vg.geom import Length, Point, Rectangle
from vecplot.vg.path import Path


@dataclass(frozen=True)
class BoundedCanvas:
    """A canvas together with the rectangle that drawing should stay inside.

    Cropping returns a new value sharing the underlying canvas; no clip path is
    installed, callers clip with the ``clip_*`` helpers.
    """

    canvas: Canvas
    rect: Rectangle

    @classmethod
    def of(cls, canvas: Canvas) -> "BoundedCanvas":
        w, h = canvas.size()
        return cls(canvas, Rectangle(Point(0.0, 0.0), Point(w, h)))

    def __getattr__(self, name: str) -> Any:
        # Canvas operations (stroke, fill, push, ...) go to the wrapped canvas.
        if name.startswith("__") or name in ("canvas", "rect"):
            raise AttributeError(name)
        return getattr(self.canvas, name)

    @property
    def min(self) -> Point:
        return self.rect.min

    @property
    def max(self) -> Point:
        return self.rect.max

    def size(self) -> Point:
        return self.rect.size()

    def center(self) -> Point:
        return Point((self.rect.max.x + self.rect.min.x) / 2, (self.rect.max.y + self.rect.min.y) / 2)

    def contains(self, p: Point) -> bool:
        return self.contains_x(p.x) and self.contains_y(p.y)

    def contains_x(self, x: Length) -> bool:
        return self.rect.min.x - clip.SLOP <= x <= self.rect.max.x + clip.SLOP

    def contains_y(self, y: Length) -> bool:
        return self.rect.min.y - clip.SLOP <= y <= self.rect.max.y + clip.SLOP

    def x(self, norm: float) -> Length:
        """Map a normalized [0, 1] x position onto the frame."""
        return norm * (self.rect.max.x - self.rect.min.x) + self.rect.min.x

    def y(self, norm: float) -> Length:
        return norm * (self.rect.max.y - self.rect.min.y) + self.rect.min.y

    def crop(self, left: Length, right: Length, bottom: Length, top: Length) -> "BoundedCanvas":
        """Offset the frame edges; ``right``/``top`` are added to the max corner."""
        return BoundedCanvas(
            self.canvas,
            Rectangle(
                Point(self.rect.min.x + left, self.rect.min.y + bottom),
                Point(self.rect.max.x + right, self.rect.max.y + top),
            ),
        )

    def with_rect(self, rect: Rectangle) -> "BoundedCanvas":
        return BoundedCanvas(self.canvas, rect)

    def set_line_style(self, sty: LineStyle) -> None:
        self.canvas.set_color(sty.color)
        self.canvas.set_line_width(sty.width)
        self.canvas.set_line_dash(list(sty.dashes), sty.dash_offset)

    def stroke_lines(self, sty: LineStyle, *lines: Sequence[Point]) -> None:
        if not lines:
            return
        self.set_line_style(sty)
        for line in lines:
            if not line:
                continue
            p = Path()
            p.move(line[0])
            for pt in line[1:]:
                p.line(pt)
            self.canvas.stroke(p)

    def stroke_line2(self, sty: LineStyle, x0: Length, y0: Length, x1: Length, y1: Length) -> None:
        self.stroke_lines(sty, [Point(x0, y0), Point(x1, y1)])

    def fill_polygon(self, color: RGBA | None, pts: Sequence[Point]) -> None:
        if not pts:
            return
        self.canvas.set_color(color)
        p = Path()
        p.move(pts[0])
        for pt in pts[1:]:
            p.line(pt)
        p.close()
        self.canvas.fill(p)

    def fill_text(self, sty: TextStyle, pt: Point, txt: str) -> None:
        """Draw possibly multi-line text anchored at ``pt`` per the style's alignment."""
        lines = sty.lines(txt)
        if not lines:
            return
        self.canvas.set_color(sty.color)
        if sty.rotation != 0:
            self.canvas.push()
            self.canvas.rotate(sty.rotation)

        cos, sin = math.cos(sty.rotation), math.sin(sty.rotation)
        x, y = pt.y * sin + pt.x * cos, pt.y * cos - pt.x * sin

        line_height = sty.font.extents().height
        y += sty.height(txt) * sty.yalign
        n = len(lines)
        for i, line in enumerate(lines):
            xoffs = sty.xalign * sty.font.width(line)
            self.canvas.fill_string(sty.font, Point(x + xoffs, y + (n - 1 - i) * line_height), line)

        if sty.rotation != 0:
            self.canvas.pop()

    def draw_glyph(self, sty: GlyphStyle, pt: Point) -> None:
        if sty.shape is None or not self.contains(pt):
            return
        self.draw_glyph_no_clip(sty, pt)

    def draw_glyph_no_clip(self, sty: GlyphStyle, pt: Point) -> None:
        if sty.shape is None:
            return
        self.canvas.set_color(sty.color)
        sty.shape.draw_glyph(self, sty, pt)

    def clip_lines_x(self, *lines: Sequence[Point]) -> list[list[Point]]:
        return clip.clip_lines_x(self.rect, *lines)

    def clip_lines_y(self, *lines: Sequence[Point]) -> list[list[Point]]:
        return clip.clip_lines_y(self.rect, *lines)

    def clip_lines_xy(self, *lines: Sequence[Point]) -> list[list[Point]]:
        return clip.clip_lines_xy(self.rect, *lines)

    def clip_polygon_x(self, pts: Sequence[Point]) -> list[Point]:
        return clip.clip_polygon_x(self.rect, pts)

    def clip_polygon_y(self, pts: Sequence[Point]) -> list[Point]:
        return clip.clip_polygon_y(self.rect, pts)

    def clip_polygon_xy(self, pts: Sequence[Point]) -> list[Point]:
        return clip.clip_polygon_xy(self.rect, pts)


@dataclass(frozen=True)
class Tiles:
    rows: int = 1
    cols: int = 1
    pad_top: Length = 0.0
    pad_bottom: Length = 0.0
    pad_left: Length = 0.0
    pad_right: Length = 0.0
    # Padding between columns and between rows.
    pad_x: Length = 0.0
    pad_y: Length = 0.0

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("tiles rows/cols must be > 0")

    def at(self, c: BoundedCanvas, x: int, y: int) -> BoundedCanvas:
        """Return the tile in column ``x`` and row ``y``; row 0 is at the top."""
        tile_h = (c.max.y - c.min.y - self.pad_top - self.pad_bottom - (self.rows - 1) * self.pad_y) / self.rows
        tile_w = (c.max.x - c.min.x - self.pad_left - self.pad_right - (self.cols - 1) * self.pad_x) / self.cols
        ymax = c.max.y - self.pad_top - y * (self.pad_y + tile_h)
        xmin = c.min.x + self.pad_left + x * (self.pad_x + tile_w)
        return c.with_rect(Rectangle(Point(xmin, ymax - tile_h), Point(xmin + tile_w, ymax)))
