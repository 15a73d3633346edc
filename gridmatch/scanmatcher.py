"""Scoring laser scans against an occupancy grid of point accumulators."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .gridline import grid_line
from .point import OrientedPoint, Point
from .smmap import PointAccumulator

__all__ = [
    "LASER_MAXBEAMS",
    "NULL_LIKELIHOOD",
    "GridMap",
    "LikelihoodScore",
    "IcpStepResult",
    "ScanMatcher",
]

log = logging.getLogger(__name__)

LASER_MAXBEAMS = 1024
NULL_LIKELIHOOD = -0.5


def _round(value: float) -> int:
    """Round half away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


class GridMap:
    """A rectangular grid of cells of side ``delta`` centred on ``center``.

    Cells are created on first write; reading a cell that was never written
    gives the shared unknown cell.
    """

    def __init__(
        self,
        center: Point = Point(),
        world_size_x: float = 10.0,
        world_size_y: float = 10.0,
        delta: float = 0.05,
    ) -> None:
        if delta <= 0:
            raise ValueError("cell size must be positive")
        self.delta = delta
        self.center = Point(center.x, center.y)
        self.size_x = max(1, math.ceil(world_size_x / delta - 1e-9))
        self.size_y = max(1, math.ceil(world_size_y / delta - 1e-9))
        self._cells: Dict[Tuple[int, int], PointAccumulator] = {}

    @property
    def world_size_x(self) -> float:
        return self.size_x * self.delta

    @property
    def world_size_y(self) -> float:
        return self.size_y * self.delta

    def __len__(self) -> int:
        """Number of cells that have been written."""
        return len(self._cells)

    def world2map(self, p: Point) -> Point:
        """Index of the cell holding world point ``p``."""
        return Point(
            _round((p.x - self.center.x) / self.delta) + self.size_x // 2,
            _round((p.y - self.center.y) / self.delta) + self.size_y // 2,
        )

    def map2world(self, ix: int, iy: int) -> Point:
        """World position of the centre of cell ``(ix, iy)``."""
        return Point(
            (ix - self.size_x // 2) * self.delta + self.center.x,
            (iy - self.size_y // 2) * self.delta + self.center.y,
        )

    def contains(self, ip: Point) -> bool:
        """Whether a cell index lies inside the grid."""
        return 0 <= ip.x < self.size_x and 0 <= ip.y < self.size_y

    def contains_world(self, p: Point) -> bool:
        """Whether a world point falls inside the grid."""
        return self.contains(self.world2map(p))

    def cell(self, ip: Point) -> PointAccumulator:
        """The cell at an index, or the unknown cell if it was never written."""
        found = self._cells.get((int(ip.x), int(ip.y)))
        return found if found is not None else PointAccumulator.unknown()

    def writable_cell(self, ip: Point) -> PointAccumulator:
        """The cell at an index, created if needed; the index must be inside."""
        if not self.contains(ip):
            raise IndexError(f"cell ({ip.x}, {ip.y}) is outside the grid")
        key = (int(ip.x), int(ip.y))
        found = self._cells.get(key)
        if found is None:
            found = self._cells[key] = PointAccumulator()
        return found

    def resize(self, xmin: float, ymin: float, xmax: float, ymax: float) -> None:
        """Make the grid cover the given world rectangle, keeping cell contents."""
        lo = self.world2map(Point(xmin, ymin))
        hi = self.world2map(Point(xmax, ymax))
        new_sx = hi.x - lo.x + 1
        new_sy = hi.y - lo.y + 1
        if new_sx < 1 or new_sy < 1:
            raise ValueError("empty rectangle")
        self.center = Point(
            self.center.x + (lo.x - self.size_x // 2 + new_sx // 2) * self.delta,
            self.center.y + (lo.y - self.size_y // 2 + new_sy // 2) * self.delta,
        )
        self.size_x, self.size_y = new_sx, new_sy
        self._cells = {
            (x - lo.x, y - lo.y): c
            for (x, y), c in self._cells.items()
            if 0 <= x - lo.x < new_sx and 0 <= y - lo.y < new_sy
        }


class LikelihoodScore(NamedTuple):
    """Score, log likelihood and number of matched beams of a pose."""

    score: float
    likelihood: float
    matched: int


class IcpStepResult(NamedTuple):
    """Pose after one alignment step, the score of the start pose and the pairs found."""

    pose: OrientedPoint
    score: float
    pairs: List[Tuple[Point, Point]]


def _endpoint(lp: OrientedPoint, r: float, angle: float) -> Point:
    return Point(
        lp.x + r * math.cos(lp.theta + angle), lp.y + r * math.sin(lp.theta + angle)
    )


@dataclass
class ScanMatcher:
    """Scores, registers and aligns laser scans on a :class:`GridMap`."""

    laser_pose: OrientedPoint = field(default_factory=OrientedPoint)
    laser_max_range: float = 81.9
    usable_range: float = 81.9
    gaussian_sigma: float = 0.02
    likelihood_sigma: float = 1.0
    kernel_size: int = 1
    opt_angular_delta: float = 0.05
    opt_linear_delta: float = 0.05
    opt_recursive_iterations: int = 3
    likelihood_skip: int = 0
    llsamplerange: float = 0.01
    llsamplestep: float = 0.01
    lasamplerange: float = 0.005
    lasamplestep: float = 0.005
    generate_map: bool = False
    enlarge_step: float = 10.0
    fullness_threshold: float = 0.1
    angular_odometry_reliability: float = 0.0
    linear_odometry_reliability: float = 0.0
    free_cell_ratio: float = math.sqrt(2.0)
    initial_beams_skip: int = 0
    laser_angles: List[float] = field(default_factory=list)
    active_area_computed: bool = False

    @property
    def laser_beams(self) -> int:
        return len(self.laser_angles)

    def set_laser_parameters(
        self, angles: Sequence[float], laser_pose: OrientedPoint
    ) -> None:
        """Set the beam angles and the laser's mounting pose."""
        angles = [float(a) for a in angles]
        if len(angles) >= LASER_MAXBEAMS:
            raise ValueError(f"at most {LASER_MAXBEAMS - 1} beams are supported")
        self.laser_pose = laser_pose
        self.laser_angles = angles

    def set_matching_parameters(
        self,
        usable_range: float,
        max_range: float,
        sigma: float,
        kernel_size: int,
        linear_delta: float,
        angular_delta: float,
        iterations: int,
        likelihood_sigma: float = 1.0,
        likelihood_skip: int = 0,
    ) -> None:
        self.usable_range = usable_range
        self.laser_max_range = max_range
        self.kernel_size = kernel_size
        self.opt_linear_delta = linear_delta
        self.opt_angular_delta = angular_delta
        self.opt_recursive_iterations = iterations
        self.gaussian_sigma = sigma
        self.likelihood_sigma = likelihood_sigma
        self.likelihood_skip = likelihood_skip

    def laser_origin(self, pose: OrientedPoint) -> OrientedPoint:
        """Pose of the laser when the robot stands at ``pose``."""
        c, s = math.cos(pose.theta), math.sin(pose.theta)
        lx, ly = self.laser_pose.x, self.laser_pose.y
        return OrientedPoint(
            pose.x + c * lx - s * ly,
            pose.y + s * lx + c * ly,
            pose.theta + self.laser_pose.theta,
        )

    def _beams(self, readings: Sequence[float]) -> Iterator[Tuple[float, float]]:
        start = self.initial_beams_skip
        return zip(list(readings)[start : self.laser_beams], self.laser_angles[start:])

    def _used_beams(self, readings: Sequence[float]) -> Iterator[Tuple[float, float]]:
        skip = 0
        for r, angle in self._beams(readings):
            skip += 1
            if skip > self.likelihood_skip:
                skip = 0
            if r > self.usable_range or skip:
                continue
            yield r, angle

    def _match(
        self,
        grid: GridMap,
        lp: OrientedPoint,
        r: float,
        angle: float,
        free_offset: float,
    ) -> Tuple[Point, Optional[Tuple[Point, Point]]]:
        """The beam endpoint and its closest full cell as (offset, cell mean)."""
        phit = _endpoint(lp, r, angle)
        iphit = grid.world2map(phit)
        ipfree = grid.world2map(_endpoint(lp, r - free_offset, angle) - phit)
        best: Optional[Tuple[Point, Point]] = None
        k = self.kernel_size
        threshold = self.fullness_threshold
        for xx in range(-k, k + 1):
            for yy in range(-k, k + 1):
                pr = Point(iphit.x + xx, iphit.y + yy)
                pf = pr + ipfree
                cell = grid.cell(pr)
                if float(cell) > threshold and float(grid.cell(pf)) < threshold:
                    mean = cell.mean()
                    mu = phit - mean
                    if best is None or mu * mu < best[0] * best[0]:
                        best = (mu, mean)
        return phit, best

    def score(
        self, grid: GridMap, pose: OrientedPoint, readings: Sequence[float]
    ) -> float:
        """Sum over beams of a Gaussian of the distance to the nearest full cell."""
        lp = self.laser_origin(pose)
        free_offset = grid.delta * grid.delta * self.free_cell_ratio
        total = 0.0
        for r, angle in self._used_beams(readings):
            _, best = self._match(grid, lp, r, angle, free_offset)
            if best is not None:
                mu = best[0]
                total += math.exp(-1.0 / self.gaussian_sigma * (mu * mu))
        return total

    def likelihood_and_score(
        self, grid: GridMap, pose: OrientedPoint, readings: Sequence[float]
    ) -> LikelihoodScore:
        """Score, log likelihood and count of beams that found a full cell."""
        lp = self.laser_origin(pose)
        no_hit = NULL_LIKELIHOOD / self.likelihood_sigma
        free_offset = grid.delta * self.free_cell_ratio
        s = 0.0
        l = 0.0
        matched = 0
        for r, angle in self._used_beams(readings):
            _, best = self._match(grid, lp, r, angle, free_offset)
            if best is not None:
                mu = best[0]
                s += math.exp(-1.0 / self.gaussian_sigma * (mu * mu))
                matched += 1
                l += (-1.0 / self.likelihood_sigma) * (mu * mu)
            else:
                l += no_hit
        return LikelihoodScore(s, l, matched)

    def icp_step(
        self, grid: GridMap, pose: OrientedPoint, readings: Sequence[float]
    ) -> IcpStepResult:
        """Pair beam endpoints with cell means; the pose itself is kept."""
        lp = self.laser_origin(pose)
        free_offset = grid.delta * grid.delta * self.free_cell_ratio
        pairs: List[Tuple[Point, Point]] = []
        for r, angle in self._used_beams(readings):
            phit, best = self._match(grid, lp, r, angle, free_offset)
            if best is not None:
                pairs.append((phit, best[1]))
        log.debug("icp step found %d pairs", len(pairs))
        new_pose = OrientedPoint(
            pose.x, pose.y, math.atan2(math.sin(pose.theta), math.cos(pose.theta))
        )
        return IcpStepResult(new_pose, self.score(grid, pose, readings), pairs)

    def invalidate_active_area(self) -> None:
        """Make the next registration recompute the area it touches."""
        self.active_area_computed = False

    def compute_active_area(
        self, grid: GridMap, pose: OrientedPoint, readings: Sequence[float]
    ) -> None:
        """Grow the grid, by ``enlarge_step`` margins, so the scan fits inside it."""
        if self.active_area_computed:
            return
        lp = self.laser_origin(pose)
        lmin = grid.map2world(0, 0)
        lmax = grid.map2world(grid.size_x - 1, grid.size_y - 1)
        min_x, min_y = min(lmin.x, lp.x), min(lmin.y, lp.y)
        max_x, max_y = max(lmax.x, lp.x), max(lmax.y, lp.y)
        for r, angle in self._beams(readings):
            if r > self.laser_max_range:
                continue
            phit = _endpoint(lp, min(r, self.usable_range), angle)
            min_x, min_y = min(min_x, phit.x), min(min_y, phit.y)
            max_x, max_y = max(max_x, phit.x), max(max_y, phit.y)
        if not grid.contains_world(Point(min_x, min_y)) or not grid.contains_world(
            Point(max_x, max_y)
        ):
            min_x = lmin.x if min_x >= lmin.x else min_x - self.enlarge_step
            max_x = lmax.x if max_x <= lmax.x else max_x + self.enlarge_step
            min_y = lmin.y if min_y >= lmin.y else min_y - self.enlarge_step
            max_y = lmax.y if max_y <= lmax.y else max_y + self.enlarge_step
            grid.resize(min_x, min_y, max_x, max_y)
        self.active_area_computed = True

    def register_scan(
        self, grid: GridMap, pose: OrientedPoint, readings: Sequence[float]
    ) -> float:
        """Write a scan into the grid; returns the change of entropy it caused."""
        if not self.active_area_computed:
            self.compute_active_area(grid, pose, readings)
        lp = self.laser_origin(pose)
        p0 = grid.world2map(lp)
        esum = 0.0
        for r, angle in self._beams(readings):
            if self.generate_map:
                if r > self.laser_max_range:
                    continue
                d = min(r, self.usable_range)
                phit = _endpoint(lp, d, angle)
                p1 = grid.world2map(phit)
                for ip in grid_line(p0, p1)[:-1]:
                    cell = grid.writable_cell(ip)
                    e = -cell.entropy()
                    cell.update(False, Point(0.0, 0.0))
                    esum += e + cell.entropy()
                if d < self.usable_range:
                    cell = grid.writable_cell(p1)
                    e = -cell.entropy()
                    cell.update(True, phit)
                    esum += e + cell.entropy()
            else:
                if r > self.laser_max_range or r > self.usable_range:
                    continue
                phit = _endpoint(lp, r, angle)
                grid.writable_cell(grid.world2map(phit)).update(True, phit)
        return esum