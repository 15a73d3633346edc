"""Grid cells crossed by a straight segment (Bresenham traversal)."""

from __future__ import annotations

from typing import List

from .point import Point

__all__ = ["grid_line_core", "grid_line"]


def grid_line_core(start: Point, end: Point) -> List[Point]:
    """Cells on the segment, ordered from the endpoint with the smaller major coordinate."""
    dx = abs(end.x - start.x)
    dy = abs(end.y - start.y)
    points: List[Point] = []

    if dy <= dx:
        d = 2 * dy - dx
        incr1 = 2 * dy
        incr2 = 2 * (dy - dx)
        if start.x > end.x:
            x, y = end.x, end.y
            ydir = -1
            xend = start.x
        else:
            x, y = start.x, start.y
            ydir = 1
            xend = end.x
        points.append(Point(x, y))
        ystep = 1 if (end.y - start.y) * ydir > 0 else -1
        while x < xend:
            x += 1
            if d < 0:
                d += incr1
            else:
                y += ystep
                d += incr2
            points.append(Point(x, y))
    else:
        d = 2 * dx - dy
        incr1 = 2 * dx
        incr2 = 2 * (dx - dy)
        if start.y > end.y:
            x, y = end.x, end.y
            xdir = -1
            yend = start.y
        else:
            x, y = start.x, start.y
            xdir = 1
            yend = end.y
        points.append(Point(x, y))
        xstep = 1 if (end.x - start.x) * xdir > 0 else -1
        while y < yend:
            y += 1
            if d < 0:
                d += incr1
            else:
                x += xstep
                d += incr2
            points.append(Point(x, y))
    return points


def grid_line(start: Point, end: Point) -> List[Point]:
    """Cells on the segment, ordered from ``start`` to ``end``."""
    points = grid_line_core(start, end)
    first = points[0]
    if (first.x, first.y) != (start.x, start.y):
        points.reverse()
    return points