"""Closed-form alignment steps for paired point sets."""

from __future__ import annotations

import math
import random
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .point import OrientedPoint, Point

__all__ = [
    "PointPair",
    "IcpResult",
    "icp_step",
    "icp_nonlinear_step",
    "generate_random_point_pairs",
]

PointPair = Tuple[Point, Point]


class IcpResult(NamedTuple):
    """The estimated transform and the squared residual it leaves."""

    transform: OrientedPoint
    error: float


def _means(pairs: Sequence[PointPair]) -> Tuple[Point, Point]:
    if not pairs:
        raise ValueError("at least one point pair is needed")
    size = len(pairs)
    first = Point(sum(a.x for a, _ in pairs) / size, sum(a.y for a, _ in pairs) / size)
    second = Point(
        sum(b.x for _, b in pairs) / size, sum(b.y for _, b in pairs) / size
    )
    return first, second


def _finish(theta: float, mean1: Point, mean2: Point, pairs: Sequence[PointPair]) -> IcpResult:
    s, c = math.sin(theta), math.cos(theta)
    tx = mean2.x - (c * mean1.x - s * mean1.y)
    ty = mean2.y - (s * mean1.x + c * mean1.y)
    error = 0.0
    for a, b in pairs:
        dx = c * a.x - s * a.y + tx - b.x
        dy = s * a.x + c * a.y + ty - b.y
        error += dx * dx + dy * dy
    return IcpResult(OrientedPoint(tx, ty, theta), error)


def icp_step(pairs: Iterable[PointPair]) -> IcpResult:
    """Estimate the transform taking each first point onto its second point."""
    pairs = list(pairs)
    mean1, mean2 = _means(pairs)
    sxx = sxy = syx = 0.0
    for a, b in pairs:
        ax, ay = a.x - mean1.x, a.y - mean1.y
        bx, by = b.x - mean2.x, b.y - mean2.y
        sxx += ax * bx
        sxy += ax * by
        syx += ay * bx
    theta = math.atan2(sxy - syx, sxx + sxy)
    return _finish(theta, mean1, mean2, pairs)


def icp_nonlinear_step(pairs: Iterable[PointPair]) -> IcpResult:
    """Estimate the transform from the mean angular offset of the centred points."""
    pairs = list(pairs)
    mean1, mean2 = _means(pairs)
    gain = math.sqrt(mean1 * mean1)
    ms = mc = 0.0
    for a, b in pairs:
        ax, ay = a.x - mean1.x, a.y - mean1.y
        bx, by = b.x - mean2.x, b.y - mean2.y
        dalpha = math.atan2(by, bx) - math.atan2(ay, ax)
        ms += gain * math.sin(dalpha)
        mc += gain * math.cos(dalpha)
    theta = math.atan2(ms, mc)
    return _finish(theta, mean1, mean2, pairs)


def generate_random_point_pairs(
    size: int,
    transform: OrientedPoint,
    noise: float = 0.0,
    rng: Optional[random.Random] = None,
) -> List[PointPair]:
    """Random points near (200, 0) paired with their transformed, noisy images."""
    draw = (rng if rng is not None else random).random
    s, c = math.sin(transform.theta), math.cos(transform.theta)
    pairs: List[PointPair] = []
    for _ in range(size):
        nx = noise * (draw() - 0.5)
        ny = noise * (draw() - 0.5)
        first = Point(100.0 * (draw() - 0.5) + 200, 10.0 * (draw() - 0.5))
        second = Point(
            c * first.x - s * first.y + transform.x + nx,
            s * first.x + c * first.y + transform.y + ny,
        )
        pairs.append((first, second))
    return pairs