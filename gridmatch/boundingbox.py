"""Bounding boxes aligned with the principal axes of a point set."""

from __future__ import annotations

import math
from typing import Iterable

from .point import Point

__all__ = ["OrientedBoundingBox"]


class OrientedBoundingBox:
    """Box around points, oriented along the eigenvectors of their covariance.

    The corners are ``ul``, ``ur``, ``ll`` and ``lr``.  Raises ValueError when
    the point set is empty or its eigenvectors cannot be computed, which is
    the case when the covariance has no cross term.
    """

    def __init__(self, points: Iterable[Point]) -> None:
        pts = list(points)
        if not pts:
            raise ValueError("a bounding box needs at least one point")
        count = len(pts)
        cx = sum(p.x for p in pts) / count
        cy = sum(p.y for p in pts) / count

        x1 = sum((p.x - cx) ** 2 for p in pts) / count
        x2 = sum((p.x - cx) * (p.y - cy) for p in pts) / count
        x3 = x2
        x4 = sum((p.y - cy) ** 2 for p in pts) / count

        term = x4 * x4 - 2 * x1 * x4 + x1 * x1 + 4 * x2 * x3
        if x3 == 0 or x2 == 0 or term < 0:
            raise ValueError(
                f"cannot compute eigenvectors: x3={x3}, x2={x2}, term={term}"
            )

        root = math.sqrt(term)
        lamda1 = 0.5 * (x4 + x1 + root)
        lamda2 = 0.5 * (x4 + x1 - root)

        v1x = -(x4 - lamda1) ** 2 * (x1 - lamda1) / (x2 * x3 * x3)
        v1y = (x4 - lamda1) * (x1 - lamda1) / (x2 * x3)
        v2x = -(x4 - lamda2) ** 2 * (x1 - lamda2) / (x2 * x3 * x3)
        v2y = (x4 - lamda2) * (x1 - lamda2) / (x2 * x3)

        lv1 = math.hypot(v1x, v1y)
        lv2 = math.hypot(v2x, v2y)
        if lv1 == 0 or lv2 == 0:
            raise ValueError("cannot compute eigenvectors: degenerate covariance")
        v1x, v1y = v1x / lv1, v1y / lv1
        v2x, v2y = v2x / lv2, v2y / lv2

        xs = [(p.x - cx) * v1x + (p.y - cy) * v1y for p in pts]
        ys = [(p.x - cx) * v2x + (p.y - cy) * v2y for p in pts]
        xmin, xmax = min(xs), max(xs)
        ymin, ymax = min(ys), max(ys)

        def corner(a: float, b: float) -> Point:
            return Point(cx + a * v1x + b * v2x, cy + a * v1y + b * v2y)

        self.ul = corner(xmin, ymin)
        self.ur = corner(xmax, ymin)
        self.ll = corner(xmin, ymax)
        self.lr = corner(xmax, ymax)

    def area(self) -> float:
        """Area of the box."""
        return math.hypot(self.ul.x - self.ll.x, self.ul.y - self.ll.y) * math.hypot(
            self.ul.x - self.ur.x, self.ul.y - self.ur.y
        )