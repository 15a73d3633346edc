"""Range sensors such as laser scanners, and their scans."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from .point import OrientedPoint, Point
from .sensor import Sensor, SensorReading

__all__ = ["Beam", "RangeSensor", "RangeReading", "SUPPRESSED_RANGE"]

SUPPRESSED_RANGE = sys.float_info.max


@dataclass
class Beam:
    """One beam of a range sensor, posed relative to the sensor's centre.

    ``span`` of zero means a line-like beam.  ``s`` and ``c`` cache the sine
    and cosine of the beam's heading.
    """

    pose: OrientedPoint = field(default_factory=OrientedPoint)
    span: float = 0.0
    max_range: float = 0.0
    s: float = field(init=False, default=0.0)
    c: float = field(init=False, default=1.0)

    def __post_init__(self) -> None:
        self.update_lookup()

    def update_lookup(self) -> None:
        """Recompute the cached sine and cosine from the pose."""
        self.s = math.sin(self.pose.theta)
        self.c = math.cos(self.pose.theta)


@dataclass
class RangeSensor(Sensor):
    """A sensor made of beams, mounted at ``pose`` on the robot."""

    pose: OrientedPoint = field(default_factory=OrientedPoint)
    beams: List[Beam] = field(default_factory=list)
    new_format: bool = False

    @classmethod
    def uniform(
        cls,
        name: str,
        beams: int,
        resolution: float,
        pose: OrientedPoint = OrientedPoint(),
        span: float = 0.0,
        max_range: float = 89.0,
    ) -> RangeSensor:
        """A sensor of ``beams`` beams spaced ``resolution`` apart, centred on heading 0."""
        beam_list: List[Beam] = []
        angle = -0.5 * resolution * beams
        for _ in range(beams):
            beam_list.append(
                Beam(OrientedPoint(0.0, 0.0, angle), span=span, max_range=max_range)
            )
            angle += resolution
        sensor = cls(name=name, pose=pose, beams=beam_list, new_format=False)
        sensor.update_beams_lookup()
        return sensor

    def update_beams_lookup(self) -> None:
        """Recompute every beam's cached sine and cosine."""
        for beam in self.beams:
            beam.update_lookup()


@dataclass
class RangeReading(SensorReading):
    """One scan: a range per beam, taken with the robot at ``pose``."""

    sensor: Optional[RangeSensor] = None
    ranges: List[float] = field(default_factory=list)
    pose: OrientedPoint = field(default_factory=OrientedPoint)

    def __post_init__(self) -> None:
        self.ranges = [float(r) for r in self.ranges]
        if (
            self.ranges
            and isinstance(self.sensor, RangeSensor)
            and len(self.ranges) != len(self.sensor.beams)
        ):
            raise ValueError(
                f"{len(self.ranges)} ranges for a sensor with "
                f"{len(self.sensor.beams)} beams"
            )

    def __len__(self) -> int:
        return len(self.ranges)

    def __getitem__(self, index: int) -> float:
        return self.ranges[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self.ranges)

    def _range_sensor(self) -> RangeSensor:
        if not isinstance(self.sensor, RangeSensor):
            raise TypeError("the reading is not attached to a range sensor")
        return self.sensor

    def _thinned(self, density: float) -> Iterable[bool]:
        """Whether each beam is kept when endpoints closer than ``density`` are dropped."""
        beams = self._range_sensor().beams
        last = Point(0.0, 0.0)
        for beam, r in zip(beams, self.ranges):
            theta = beam.pose.theta
            lp = Point(math.cos(theta) * r, math.sin(theta) * r)
            dp = last - lp
            if math.sqrt(dp * dp) < density:
                yield False
            else:
                last = lp
                yield True

    def raw_view(self, density: float = 0.0) -> List[float]:
        """The ranges, with beams whose endpoint lies within ``density`` of the
        last kept endpoint replaced by ``SUPPRESSED_RANGE``."""
        if density == 0:
            return list(self.ranges)
        return [
            r if kept else SUPPRESSED_RANGE
            for r, kept in zip(self.ranges, self._thinned(density))
        ]

    def active_beams(self, density: float = 0.0) -> int:
        """How many beams ``raw_view`` keeps at this density."""
        if density == 0:
            return len(self.ranges)
        return sum(self._thinned(density))

    def cartesian_form(self, max_range: float = 1e6) -> List[Point]:
        """Beam endpoints in the robot frame; beams at or past ``max_range`` give (0, 0)."""
        sensor = self._range_sensor()
        if not sensor.beams:
            raise ValueError("the range sensor has no beams")
        if len(self.ranges) < len(sensor.beams):
            raise ValueError("the reading has fewer ranges than the sensor has beams")
        px, py = sensor.pose.x, sensor.pose.y
        ps, pc = math.sin(sensor.pose.theta), math.cos(sensor.pose.theta)
        points: List[Point] = []
        for beam, rho in zip(sensor.beams, self.ranges):
            if rho >= max_range:
                points.append(Point(0.0, 0.0))
                continue
            bx = beam.pose.x + beam.c * rho
            by = beam.pose.y + beam.s * rho
            points.append(Point(px + pc * bx - ps * by, py + ps * bx + pc * by))
        return points