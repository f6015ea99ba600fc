from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol

from vecplot.vg.canvas import BLACK, RGBA
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle, rotate_point

if TYPE_CHECKING:
    from vecplot.draw.canvas import BoundedCanvas


@dataclass(frozen=True)
class LineStyle:
    color: RGBA | None = BLACK
    width: Length = 1.0
    dashes: tuple[Length, ...] = ()
    dash_offset: Length = 0.0

    def with_width(self, width: Length) -> "LineStyle":
        return replace(self, width=width)


class GlyphDrawer(Protocol):
    def draw_glyph(self, c: "BoundedCanvas", sty: "GlyphStyle", pt: Point) -> None:
        ...


@dataclass(frozen=True)
class GlyphStyle:
    color: RGBA | None = BLACK
    radius: Length = 2.5
    shape: GlyphDrawer | None = None

    def rectangle(self) -> Rectangle:
        """Bounds of the glyph drawn centred on the origin."""
        return Rectangle(Point(-self.radius, -self.radius), Point(self.radius, self.radius))


@dataclass(frozen=True)
class TextStyle:
    """How text looks and where it sits relative to its anchor.

    ``xalign`` and ``yalign`` are multiplied by the block width and height and
    added to the anchor: (-0.5, -0.5) centres the text on the anchor, (0, 0)
    puts the anchor at the bottom-left baseline, (-1, 0) right-aligns it.
    ``rotation`` is counter-clockwise in radians about the anchor.
    """

    color: RGBA | None = BLACK
    font: Font = field(default_factory=lambda: Font(size=10.0))
    rotation: float = 0.0
    xalign: float = 0.0
    yalign: float = 0.0

    def lines(self, txt: str) -> list[str]:
        txt = txt.rstrip("\n")
        if not txt:
            return []
        return txt.split("\n")

    def width(self, txt: str) -> Length:
        return max((self.font.width(line) for line in self.lines(txt)), default=0.0)

    def height(self, txt: str) -> Length:
        n = len(self.lines(txt))
        if n == 0:
            return 0.0
        e = self.font.extents()
        return e.height * (n - 1) + e.ascent

    def rectangle(self, txt: str) -> Rectangle:
        """Bounds of the aligned, rotated text block drawn at the origin."""
        w, h = self.width(txt), self.height(txt)
        xoff = self.xalign * w
        yoff = self.yalign * h
        corners = [
            rotate_point(self.rotation, Point(xoff, yoff)),
            rotate_point(self.rotation, Point(xoff, yoff + h)),
            rotate_point(self.rotation, Point(xoff + w, yoff)),
            rotate_point(self.rotation, Point(xoff + w, yoff + h)),
        ]
        return Rectangle(
            Point(min(p.x for p in corners), min(p.y for p in corners)),
            Point(max(p.x for p in corners), max(p.y for p in corners)),
        )
