from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Sequence

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import LineStyle
from vecplot.errors import ContourStructural, PlotDataError
from vecplot.glyphbox import GlyphBox
from vecplot.plotter.base import DEFAULT_LINE_STYLE
from vecplot.plotter.conrec import ContourGrid, ContourPoint, conrec
from vecplot.vg.canvas import RGBA
from vecplot.vg.geom import Point, Rectangle
from vecplot.vg.path import Path

if TYPE_CHECKING:
    from vecplot.plot import Plot


LOGGER = logging.getLogger(__name__)

_NIL = -1


@dataclass(frozen=True)
class ContourPath:
    """One connected component of a level, in data coordinates."""

    z: float
    points: tuple[ContourPoint, ...]
    closed: bool


class _Arena:
    """Doubly linked nodes addressed by index; ``_NIL`` ends a chain."""

    def __init__(self) -> None:
        self.value: list[ContourPoint] = []
        self.next: list[int] = []
        self.prev: list[int] = []

    def new(self, p: ContourPoint) -> int:
        self.value.append(p)
        self.next.append(_NIL)
        self.prev.append(_NIL)
        return len(self.value) - 1


@dataclass(eq=False)
class _Line:
    arena: _Arena
    z: float
    head: int = _NIL
    tail: int = _NIL

    @classmethod
    def of(cls, arena: _Arena, z: float, p1: ContourPoint, p2: ContourPoint) -> "_Line":
        line = cls(arena, z)
        line.head = line.tail = arena.new(p1)
        line.push_back(p2)
        return line

    def front(self) -> ContourPoint:
        return self.arena.value[self.head]

    def back(self) -> ContourPoint:
        return self.arena.value[self.tail]

    def push_front(self, p: ContourPoint) -> None:
        n = self.arena.new(p)
        self.arena.next[n] = self.head
        self.arena.prev[self.head] = n
        self.head = n

    def push_back(self, p: ContourPoint) -> None:
        n = self.arena.new(p)
        self.arena.prev[n] = self.tail
        self.arena.next[self.tail] = n
        self.tail = n

    def drop_front(self) -> None:
        self.head = self.arena.next[self.head]
        self.arena.prev[self.head] = _NIL

    def drop_back(self) -> None:
        self.tail = self.arena.prev[self.tail]
        self.arena.next[self.tail] = _NIL

    def nodes(self) -> list[int]:
        out = []
        n = self.head
        while n != _NIL:
            out.append(n)
            n = self.arena.next[n]
        return out

    def points(self) -> list[ContourPoint]:
        return [self.arena.value[n] for n in self.nodes()]

    def extend(self, p1: ContourPoint, p2: ContourPoint, ends: dict[ContourPoint, "_Line"]) -> bool:
        """Grow whichever end touches the segment; False if neither does."""
        for known, new in ((p1, p2), (p2, p1)):
            if self.front() == known:
                self.push_front(new)
                del ends[known]
                ends[new] = self
                return True
        for known, new in ((p1, p2), (p2, p1)):
            if self.back() == known:
                self.push_back(new)
                del ends[known]
                ends[new] = self
                return True
        return False

    def connect(self, b: "_Line", ends: dict[ContourPoint, "_Line"]) -> bool:
        """Absorb ``b``, which shares one end point with this line."""
        f1, b1 = self.front(), self.back()
        f2, b2 = b.front(), b.back()
        arena = self.arena
        if f1 == f2:
            del ends[f2]
            ends[b2] = self
            b.drop_front()
            for n in b.nodes():
                self.push_front(arena.value[n])
            return True
        if f1 == b2:
            del ends[b2]
            ends[f2] = self
            b.drop_back()
            arena.next[b.tail] = self.head
            arena.prev[self.head] = b.tail
            self.head = b.head
            return True
        if b1 == f2:
            del ends[f2]
            ends[b2] = self
            b.drop_front()
            arena.next[self.tail] = b.head
            arena.prev[b.head] = self.tail
            self.tail = b.tail
            return True
        if b1 == b2:
            del ends[b2]
            ends[f2] = self
            b.drop_back()
            for n in reversed(b.nodes()):
                self.push_back(arena.value[n])
            return True
        return False

    def excise_loops(self) -> list["_Line"]:
        """Split repeated-vertex loops out of this line and return them.

        The scan continues along this line after each excision so a line
        crossing itself several times yields one loop per crossing.
        """
        arena = self.arena
        loops: list[_Line] = []
        first = self.front()
        seen: dict[ContourPoint, int] = {}
        e = self.head
        while e != _NIL:
            v = arena.value[e]
            p = seen.get(v)
            if p is not None and v != first:
                start = arena.next[p]
                after = arena.next[e]
                # Unlink start..e from this line.
                arena.next[p] = after
                if after == _NIL:
                    self.tail = p
                else:
                    arena.prev[after] = p
                loop = _Line(arena, self.z, start, e)
                arena.prev[start] = _NIL
                arena.next[e] = _NIL
                loop.push_front(v)
                for n in loop.nodes():
                    if seen.get(arena.value[n]) == n:
                        del seen[arena.value[n]]
                seen[v] = p
                loops.append(loop)
                e = after
                continue
            seen[v] = e
            e = arena.next[e]
        return loops


def contour_paths(grid: ContourGrid, levels: Sequence[float]) -> dict[float, list[ContourPath]]:
    """Trace every level through ``grid`` and join segments into paths."""
    zs = sorted({float(z) for z in levels if not math.isnan(z)})
    arena = _Arena()
    ends: dict[float, dict[ContourPoint, _Line]] = {}
    # Insertion-ordered set of live lines.
    lines: dict[_Line, None] = {}
    # Segments along a cell edge lying exactly on a level come from both cells.
    seen: set[tuple[float, ContourPoint, ContourPoint]] = set()

    def add(i: int, j: int, p1: ContourPoint, p2: ContourPoint, z: float) -> None:
        if p1 == p2:
            return
        key = (z, p1, p2) if p1 <= p2 else (z, p2, p1)
        if key in seen:
            return
        seen.add(key)
        z_ends = ends.setdefault(z, {})
        c1 = z_ends.get(p1)
        c2 = z_ends.get(p2)
        if c1 is None and c2 is None:
            line = _Line.of(arena, z, p1, p2)
            z_ends[p1] = line
            z_ends[p2] = line
            lines[line] = None
            return
        target = c1 if c1 is not None else c2
        if not target.extend(p1, p2, z_ends):
            raise ContourStructural(f"segment {p1} -> {p2} at level {z:g} does not touch its line ends")
        if c1 is c2 or c1 is None or c2 is None:
            return
        if not c1.connect(c2, z_ends):
            raise ContourStructural(f"lines at level {z:g} share no end point")
        del lines[c2]

    conrec(grid, zs, add)

    work = list(lines)
    done: list[_Line] = []
    while work:
        line = work.pop(0)
        loops = line.excise_loops()
        if loops:
            LOGGER.debug("excised %d loop(s) at level %g", len(loops), line.z)
        work.extend(loops)
        done.append(line)

    out: dict[float, list[ContourPath]] = {z: [] for z in zs}
    for line in done:
        pts = tuple(line.points())
        closed = len(pts) > 2 and pts[0] == pts[-1]
        out[line.z].append(ContourPath(line.z, pts, closed))
    LOGGER.debug("traced %d contour path(s) over %d level(s)", len(done), len(zs))
    return out


@dataclass
class Contour:
    """Contour lines of a grid, colored by level from ``palette``."""

    grid: ContourGrid
    levels: list[float]
    palette: Sequence[RGBA | None]
    line_style: LineStyle = DEFAULT_LINE_STYLE
    min: float = math.inf
    max: float = -math.inf

    def __post_init__(self) -> None:
        if not self.palette:
            raise PlotDataError("contour palette is empty")
        self.levels = sorted(float(z) for z in self.levels if not math.isnan(z))
        if not self.levels:
            raise PlotDataError("contour needs at least one level")

    @classmethod
    def from_grid(cls, grid: ContourGrid, levels: Sequence[float], palette: Sequence[RGBA | None]) -> "Contour":
        lo, hi = math.inf, -math.inf
        cols, rows = grid.dims()
        for i in range(cols):
            for j in range(rows):
                v = grid.z(i, j)
                if math.isnan(v):
                    continue
                lo = min(lo, v)
                hi = max(hi, v)
        return cls(grid, list(levels), palette, min=lo, max=hi)

    def plot(self, c: BoundedCanvas, plt: "Plot") -> None:
        trx, try_ = plt.transforms(c)
        c.set_line_style(self.line_style)
        first, last = self.levels[0], self.levels[-1]
        ps = (len(self.palette) - 1) / (last - first) if len(self.levels) > 1 else 0.0
        paths = contour_paths(self.grid, self.levels)
        for z in self.levels:
            col = self.palette[int((z - first) * ps + 0.5)]
            if col is None:
                continue
            for cp in paths.get(z, ()):
                pa = Path()
                x, y = cp.points[0]
                pa.move(Point(trx(x), try_(y)))
                for x, y in cp.points[1:]:
                    pa.line(Point(trx(x), try_(y)))
                if cp.closed:
                    pa.close()
                c.set_color(col)
                c.stroke(pa)

    def data_range(self) -> tuple[float, float, float, float]:
        cols, rows = self.grid.dims()
        return self.grid.x(0), self.grid.x(cols - 1), self.grid.y(0), self.grid.y(rows - 1)

    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        cols, rows = self.grid.dims()
        rect = Rectangle(Point(-2.5, -2.5), Point(2.5, 2.5))
        return [
            GlyphBox(plt.x.norm(self.grid.x(i)), plt.y.norm(self.grid.y(j)), rect)
            for i in range(cols)
            for j in range(rows)
        ]
