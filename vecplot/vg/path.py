from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Union

from vecplot.vg.geom import Length, Point


@dataclass(frozen=True)
class Move:
    pos: Point


@dataclass(frozen=True)
class Line:
    pos: Point


@dataclass(frozen=True)
class Arc:
    center: Point
    radius: Length
    start: float
    sweep: float

    def end(self) -> Point:
        angle = self.start + self.sweep
        return Point(self.center.x + self.radius * math.cos(angle), self.center.y + self.radius * math.sin(angle))


@dataclass(frozen=True)
class Close:
    pass


PathComp = Union[Move, Line, Arc, Close]


@dataclass
class Path:
    """An ordered list of path components. Purely data."""

    comps: list[PathComp] = field(default_factory=list)

    def move(self, p: Point) -> None:
        self.comps.append(Move(p))

    def line(self, p: Point) -> None:
        self.comps.append(Line(p))

    def arc(self, center: Point, radius: Length, start: float, sweep: float) -> None:
        self.comps.append(Arc(center, radius, start, sweep))

    def close(self) -> None:
        self.comps.append(Close())

    def __iter__(self):
        return iter(self.comps)

    def __len__(self) -> int:
        return len(self.comps)


def flatten(path: Path, *, segments_per_turn: int = 64) -> list[list[Point]]:
    """Turn a path into polylines, approximating arcs by line segments.

    Closed subpaths end with a copy of their first point.
    """
    out: list[list[Point]] = []
    current: list[Point] = []
    for comp in path:
        if isinstance(comp, Move):
            if len(current) > 1:
                out.append(current)
            current = [comp.pos]
        elif isinstance(comp, Line):
            current.append(comp.pos)
        elif isinstance(comp, Arc):
            n = max(2, int(math.ceil(abs(comp.sweep) / (2 * math.pi) * segments_per_turn)))
            for i in range(n + 1):
                angle = comp.start + comp.sweep * i / n
                current.append(
                    Point(comp.center.x + comp.radius * math.cos(angle), comp.center.y + comp.radius * math.sin(angle))
                )
        elif isinstance(comp, Close):
            if current:
                current.append(current[0])
                out.append(current)
                current = [current[0]]
    if len(current) > 1:
        out.append(current)
    return out
