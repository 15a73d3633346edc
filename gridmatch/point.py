"""Two-dimensional points, planar poses and the small geometry built on them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Union

__all__ = [
    "Point",
    "OrientedPoint",
    "normalize_angle",
    "absolute_difference",
    "absolute_sum",
    "point_max",
    "point_min",
    "interpolate",
    "euclidian_dist",
]


def normalize_angle(theta: float) -> float:
    """Bring an angle into the half-open interval [-pi, pi)."""
    if -math.pi <= theta < math.pi:
        return theta
    theta -= int(theta / (2 * math.pi)) * 2 * math.pi
    if theta >= math.pi:
        theta -= 2 * math.pi
    if theta < -math.pi:
        theta += 2 * math.pi
    return theta


@dataclass(frozen=True)
class Point:
    """A point (or vector) in the plane; coordinates may be ints or floats."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: object) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: object) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: object) -> Union[Point, float]:
        """Scale by a number, or take the dot product with another point."""
        if isinstance(other, Point):
            return self.x * other.x + self.y * other.y
        if isinstance(other, Real):
            return Point(self.x * other, self.y * other)
        return NotImplemented

    def __rmul__(self, other: object) -> Point:
        if isinstance(other, Real):
            return Point(self.x * other, self.y * other)
        return NotImplemented


@dataclass(frozen=True)
class OrientedPoint(Point):
    """A planar pose: a position and a heading angle."""

    theta: float = 0.0

    def __add__(self, other: object) -> Point:
        if isinstance(other, OrientedPoint):
            return OrientedPoint(
                self.x + other.x, self.y + other.y, self.theta + other.theta
            )
        return super().__add__(other)

    def __sub__(self, other: object) -> Point:
        if isinstance(other, OrientedPoint):
            return OrientedPoint(
                self.x - other.x, self.y - other.y, self.theta - other.theta
            )
        return super().__sub__(other)

    def __mul__(self, other: object) -> Union[OrientedPoint, float]:
        """Scale every component by a number, or dot the positions."""
        if isinstance(other, Point):
            return self.x * other.x + self.y * other.y
        if isinstance(other, Real):
            return OrientedPoint(self.x * other, self.y * other, self.theta * other)
        return NotImplemented

    def __rmul__(self, other: object) -> OrientedPoint:
        if isinstance(other, Real):
            return OrientedPoint(self.x * other, self.y * other, self.theta * other)
        return NotImplemented

    def normalized(self) -> OrientedPoint:
        """The same pose with its heading brought into [-pi, pi)."""
        return OrientedPoint(self.x, self.y, normalize_angle(self.theta))

    def rotate(self, alpha: float) -> OrientedPoint:
        """Rotate the pose about the origin by ``alpha``."""
        s, c = math.sin(alpha), math.cos(alpha)
        a = alpha + self.theta
        a = math.atan2(math.sin(a), math.cos(a))
        return OrientedPoint(c * self.x - s * self.y, s * self.x + c * self.y, a)

    def position(self) -> Point:
        """The position part of the pose."""
        return Point(self.x, self.y)


def absolute_difference(p1: OrientedPoint, p2: OrientedPoint) -> OrientedPoint:
    """Express ``p1`` in the frame of ``p2``."""
    delta = p1 - p2
    dtheta = math.atan2(math.sin(delta.theta), math.cos(delta.theta))
    s, c = math.sin(p2.theta), math.cos(p2.theta)
    return OrientedPoint(
        c * delta.x + s * delta.y, -s * delta.x + c * delta.y, dtheta
    )


def absolute_sum(p1: OrientedPoint, p2: Point) -> Point:
    """Map ``p2``, given in the frame of ``p1``, into the global frame."""
    s, c = math.sin(p1.theta), math.cos(p1.theta)
    if isinstance(p2, OrientedPoint):
        return (
            OrientedPoint(c * p2.x - s * p2.y, s * p2.x + c * p2.y, p2.theta) + p1
        )
    return Point(c * p2.x - s * p2.y, s * p2.x + c * p2.y) + p1.position()


def point_max(p1: Point, p2: Point) -> Point:
    """Component-wise maximum of two points."""
    return Point(max(p1.x, p2.x), max(p1.y, p2.y))


def point_min(p1: Point, p2: Point) -> Point:
    """Component-wise minimum of two points."""
    return Point(min(p1.x, p2.x), min(p1.y, p2.y))


def interpolate(p1: Point, t1: float, p2: Point, t2: float, t3: float) -> Point:
    """Interpolate between ``p1`` at time ``t1`` and ``p2`` at ``t2`` for time ``t3``."""
    gain = (t3 - t1) / (t2 - t1)
    if isinstance(p1, OrientedPoint) and isinstance(p2, OrientedPoint):
        s = math.sin(p1.theta) + math.sin(p2.theta) * gain
        c = math.cos(p1.theta) + math.cos(p2.theta) * gain
        return OrientedPoint(
            p1.x + (p2.x - p1.x) * gain,
            p1.y + (p2.y - p1.y) * gain,
            math.atan2(s, c),
        )
    p1, p2 = Point(p1.x, p1.y), Point(p2.x, p2.y)
    return p1 + (p2 - p1) * gain


def euclidian_dist(p1: Point, p2: Point) -> float:
    """Euclidean distance between the positions of two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)