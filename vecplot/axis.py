from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import TYPE_CHECKING, Sequence

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle, TextStyle
from vecplot.glyphbox import GlyphBox
from vecplot.scales import LinearScale, Normalizer
from vecplot.ticks import DefaultTicks, Tick, Ticker
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle

if TYPE_CHECKING:
    from vecplot.plot import Plot


@dataclass
class AxisLabel:
    text: str = ""
    style: TextStyle = field(default_factory=lambda: TextStyle(font=Font(size=12.0)))


@dataclass
class AxisTicks:
    label: TextStyle = field(default_factory=lambda: TextStyle(font=Font(size=10.0)))
    line: LineStyle = field(default_factory=lambda: LineStyle(width=0.5))
    length: Length = 8.0
    marker: Ticker = field(default_factory=DefaultTicks)

    def length_offset(self, t: Tick) -> Length:
        """Minor tick marks start half way along the tick length."""
        return self.length / 2 if t.is_minor() else 0.0


@dataclass
class Axis:
    """One coordinate direction: range, scale, ticks, label and styles."""

    min: float = math.inf
    max: float = -math.inf
    label: AxisLabel = field(default_factory=AxisLabel)
    line: LineStyle = field(default_factory=lambda: LineStyle(width=0.5))
    padding: Length = 5.0
    tick: AxisTicks = field(default_factory=AxisTicks)
    scale: Normalizer = field(default_factory=LinearScale)

    def sanitize(self) -> None:
        if math.isinf(self.min):
            self.min = 0.0
        if math.isinf(self.max):
            self.max = 0.0
        if self.min > self.max:
            self.min, self.max = self.max, self.min
        if self.min == self.max:
            self.min -= 1
            self.max += 1

    def norm(self, x: float) -> float:
        """Fraction of the axis length at data value ``x``: 0 at min, 1 at max."""
        return self.scale.normalize(self.min, self.max, x)

    def draw_ticks(self) -> bool:
        return self.tick.line.width > 0 and self.tick.length > 0

    def marks(self) -> list[Tick]:
        return self.tick.marker.ticks(self.min, self.max)


def tick_label_height(sty: TextStyle, ticks: Sequence[Tick]) -> Length:
    return max((sty.height(t.label) for t in ticks if not t.is_minor()), default=0.0)


def tick_label_width(sty: TextStyle, ticks: Sequence[Tick]) -> Length:
    return max((sty.width(t.label) for t in ticks if not t.is_minor()), default=0.0)


class HorizontalAxis:
    """Draws an axis along the bottom edge of a canvas."""

    def __init__(self, axis: Axis) -> None:
        self.axis = axis

    def size(self) -> Length:
        a = self.axis
        h = 0.0
        if a.label.text:
            h -= a.label.style.font.extents().descent
            h += a.label.style.height(a.label.text)
        marks = a.marks()
        if marks:
            if a.draw_ticks():
                h += a.tick.length
            h += tick_label_height(a.tick.label, marks)
        h += a.line.width / 2
        h += a.padding
        return h

    def draw(self, c: BoundedCanvas) -> None:
        a = self.axis
        y = c.min.y
        if a.label.text:
            y -= a.label.style.font.extents().descent
            c.fill_text(replace(a.label.style, xalign=-0.5, yalign=0.0), Point(c.center().x, y), a.label.text)
            y += a.label.style.height(a.label.text)

        marks = a.marks()
        label_style = replace(a.tick.label, xalign=-0.5, yalign=0.0)
        for t in marks:
            x = c.x(a.norm(t.value))
            if not c.contains_x(x) or t.is_minor():
                continue
            c.fill_text(label_style, Point(x, y), t.label)

        if marks:
            y += tick_label_height(a.tick.label, marks)
        else:
            y += a.line.width / 2

        if marks and a.draw_ticks():
            length = a.tick.length
            for t in marks:
                x = c.x(a.norm(t.value))
                if not c.contains_x(x):
                    continue
                c.stroke_line2(a.tick.line, x, y + a.tick.length_offset(t), x, y + length)
            y += length

        c.stroke_line2(a.line, c.min.x, y, c.max.x, y)

    def glyph_boxes(self, plt: "Plot | None" = None) -> list[GlyphBox]:
        a = self.axis
        boxes = []
        for t in a.marks():
            if t.is_minor():
                continue
            w = a.tick.label.width(t.label)
            boxes.append(GlyphBox(x=a.norm(t.value), rect=Rectangle(Point(-w / 2, 0.0), Point(w / 2, 0.0))))
        return boxes


class VerticalAxis:
    """Draws an axis up the left edge of a canvas."""

    def __init__(self, axis: Axis) -> None:
        self.axis = axis

    def size(self) -> Length:
        a = self.axis
        w = 0.0
        if a.label.text:
            w -= a.label.style.font.extents().descent
            w += a.label.style.height(a.label.text)
        marks = a.marks()
        if marks:
            lwidth = tick_label_width(a.tick.label, marks)
            if lwidth > 0:
                w += lwidth
                w += a.label.style.width(" ")
            if a.draw_ticks():
                w += a.tick.length
        w += a.line.width / 2
        w += a.padding
        return w

    def draw(self, c: BoundedCanvas) -> None:
        a = self.axis
        x = c.min.x
        if a.label.text:
            x += a.label.style.height(a.label.text)
            style = replace(a.label.style, rotation=math.pi / 2, xalign=-0.5, yalign=0.0)
            c.fill_text(style, Point(x, c.center().y), a.label.text)
            x -= a.label.style.font.extents().descent

        marks = a.marks()
        lwidth = tick_label_width(a.tick.label, marks)
        if marks and lwidth > 0:
            x += lwidth

        label_style = replace(a.tick.label, xalign=-1.0, yalign=-0.5)
        major = False
        for t in marks:
            y = c.y(a.norm(t.value))
            if not c.contains_y(y) or t.is_minor():
                continue
            c.fill_text(label_style, Point(x, y), t.label)
            major = True
        if major:
            x += a.tick.label.width(" ")

        if marks and a.draw_ticks():
            length = a.tick.length
            for t in marks:
                y = c.y(a.norm(t.value))
                if not c.contains_y(y):
                    continue
                c.stroke_line2(a.tick.line, x + a.tick.length_offset(t), y, x + length, y)
            x += length

        c.stroke_line2(a.line, x, c.min.y, x, c.max.y)

    def glyph_boxes(self, plt: "Plot | None" = None) -> list[GlyphBox]:
        a = self.axis
        boxes = []
        for t in a.marks():
            if t.is_minor():
                continue
            h = a.tick.label.height(t.label)
            boxes.append(GlyphBox(y=a.norm(t.value), rect=Rectangle(Point(0.0, -h / 2), Point(0.0, h / 2))))
        return boxes
