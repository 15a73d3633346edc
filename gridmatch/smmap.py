"""Grid cells that accumulate laser hits for scan matching."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .point import Point

__all__ = ["SIGHT_INC", "PointAccumulator"]

SIGHT_INC = 1


@dataclass
class PointAccumulator:
    """Counts hits and visits of a cell and sums the positions of the hits."""

    acc: Point = field(default_factory=Point)
    n: int = 0
    visits: int = 0

    _unknown: ClassVar[Optional["PointAccumulator"]] = None

    def update(self, value: bool, p: Point = Point()) -> None:
        """Record a hit at ``p`` when ``value`` is true, otherwise a pass-through."""
        if value:
            self.acc = Point(self.acc.x + p.x, self.acc.y + p.y)
            self.n += 1
            self.visits += SIGHT_INC
        else:
            self.visits += 1

    def mean(self) -> Point:
        """Mean position of the recorded hits."""
        return Point(self.acc.x, self.acc.y) * (1.0 / self.n)

    def __float__(self) -> float:
        """Occupancy: the hit ratio, or -1 for a cell never visited."""
        if not self.visits:
            return -1.0
        return self.n * SIGHT_INC / self.visits

    def add(self, other: PointAccumulator) -> None:
        """Merge the counts of another cell into this one."""
        self.acc = self.acc + other.acc
        self.n += other.n
        self.visits += other.visits

    def entropy(self) -> float:
        """Entropy of the cell's occupancy estimate."""
        if not self.visits:
            return -math.log(0.5)
        if self.n == self.visits or self.n == 0:
            return 0.0
        x = self.n * SIGHT_INC / self.visits
        return -(x * math.log(x) + (1 - x) * math.log(1 - x))

    @classmethod
    def unknown(cls) -> PointAccumulator:
        """The shared cell that stands for unknown space."""
        if PointAccumulator._unknown is None:
            PointAccumulator._unknown = PointAccumulator()
        return PointAccumulator._unknown