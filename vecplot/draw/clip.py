from __future__ import annotations

from typing import Callable, Sequence

from vecplot.vg.geom import Point, Rectangle


# Floating point slack: points this close to a clip edge count as inside.
SLOP = 3e-8

InFn = Callable[[Point, Point], bool]


def is_left(p: Point, clip: Point) -> bool:
    return p.x <= clip.x + SLOP


def is_right(p: Point, clip: Point) -> bool:
    return p.x >= clip.x - SLOP


def is_below(p: Point, clip: Point) -> bool:
    return p.y <= clip.y + SLOP


def is_above(p: Point, clip: Point) -> bool:
    return p.y >= clip.y - SLOP


def isect(p0: Point, p1: Point, clip: Point, norm: Point) -> Point:
    """Intersection of segment p0->p1 with the line through ``clip`` normal to ``norm``."""
    t = (p0 - clip).dot(norm) / (p0 - p1).dot(norm)
    return (p1 - p0) * t + p0


def clip_line(inside: InFn, clip: Point, norm: Point, pts: Sequence[Point]) -> list[list[Point]]:
    lines: list[list[Point]] = []
    cur_line: list[Point] = []
    last = len(pts) - 1
    for i in range(1, len(pts)):
        cur, nxt = pts[i - 1], pts[i]
        cur_in, next_in = inside(cur, clip), inside(nxt, clip)
        if cur_in and next_in:
            cur_line.append(cur)
        elif cur_in:
            cur_line.extend((cur, isect(cur, nxt, clip, norm)))
            lines.append(cur_line)
            cur_line = []
        elif next_in:
            cur_line.append(isect(cur, nxt, clip, norm))
        if next_in and i == last:
            cur_line.append(nxt)
    if len(cur_line) > 1:
        lines.append(cur_line)
    return lines


def clip_poly(inside: InFn, clip: Point, norm: Point, pts: Sequence[Point]) -> list[Point]:
    clipped: list[Point] = []
    n = len(pts)
    for i in range(n):
        cur, nxt = pts[i], pts[(i + 1) % n]
        cur_in, next_in = inside(cur, clip), inside(nxt, clip)
        if cur_in and next_in:
            clipped.append(cur)
        elif cur_in:
            clipped.extend((cur, isect(cur, nxt, clip, norm)))
        elif next_in:
            clipped.append(isect(cur, nxt, clip, norm))
    return clipped


def clip_lines_x(rect: Rectangle, *lines: Sequence[Point]) -> list[list[Point]]:
    right_clipped: list[list[Point]] = []
    for line in lines:
        right_clipped.extend(clip_line(is_left, Point(rect.max.x, rect.min.y), Point(-1, 0), line))
    out: list[list[Point]] = []
    for line in right_clipped:
        out.extend(clip_line(is_right, rect.min, Point(1, 0), line))
    return out


def clip_lines_y(rect: Rectangle, *lines: Sequence[Point]) -> list[list[Point]]:
    bottom_clipped: list[list[Point]] = []
    for line in lines:
        bottom_clipped.extend(clip_line(is_above, rect.min, Point(0, -1), line))
    out: list[list[Point]] = []
    for line in bottom_clipped:
        out.extend(clip_line(is_below, Point(rect.min.x, rect.max.y), Point(0, 1), line))
    return out


def clip_lines_xy(rect: Rectangle, *lines: Sequence[Point]) -> list[list[Point]]:
    return clip_lines_y(rect, *clip_lines_x(rect, *lines))


def clip_polygon_x(rect: Rectangle, pts: Sequence[Point]) -> list[Point]:
    return clip_poly(is_left, Point(rect.max.x, rect.min.y), Point(-1, 0), clip_poly(is_right, rect.min, Point(1, 0), pts))


def clip_polygon_y(rect: Rectangle, pts: Sequence[Point]) -> list[Point]:
    return clip_poly(
        is_below, Point(rect.min.x, rect.max.y), Point(0, 1), clip_poly(is_above, rect.min, Point(0, -1), pts)
    )


def clip_polygon_xy(rect: Rectangle, pts: Sequence[Point]) -> list[Point]:
    return clip_polygon_y(rect, clip_polygon_x(rect, pts))
