"""Pose searches on a grid: hill climbing, covariance estimation and likelihood sampling."""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, NamedTuple, Sequence

from .point import OrientedPoint
from .scanmatcher import GridMap, ScanMatcher
from .stat import Covariance3, Gaussian3

__all__ = [
    "ScoredMove",
    "SearchResult",
    "CovarianceSearchResult",
    "LikelihoodResult",
    "optimize",
    "optimize_with_covariance",
    "icp_optimize",
    "likelihood",
    "likelihood_with_odometry",
]

log = logging.getLogger(__name__)


@dataclass
class ScoredMove:
    """A pose visited by a search, with its score and (log) likelihood."""

    pose: OrientedPoint
    score: float
    likelihood: float


class SearchResult(NamedTuple):
    """The pose a search settled on and its score."""

    pose: OrientedPoint
    score: float


class CovarianceSearchResult(NamedTuple):
    """The pose a search settled on, the spread of the poses it tried, and its score."""

    pose: OrientedPoint
    covariance: Covariance3
    score: float


class LikelihoodResult(NamedTuple):
    """Log of the summed likelihood, the largest log likelihood, and their moments."""

    value: float
    lmax: float
    mean: OrientedPoint
    covariance: Covariance3


def _wrap(angle: float) -> float:
    return math.atan2(math.sin(angle), math.cos(angle))


def _neighbours(
    pose: OrientedPoint, ldelta: float, adelta: float
) -> Iterator[OrientedPoint]:
    """The six single-step moves, in the order front, back, left, right, turns."""
    yield OrientedPoint(pose.x + ldelta, pose.y, pose.theta)
    yield OrientedPoint(pose.x - ldelta, pose.y, pose.theta)
    yield OrientedPoint(pose.x, pose.y - ldelta, pose.theta)
    yield OrientedPoint(pose.x, pose.y + ldelta, pose.theta)
    yield OrientedPoint(pose.x, pose.y, pose.theta + adelta)
    yield OrientedPoint(pose.x, pose.y, pose.theta - adelta)


def _odometry_gain(
    matcher: ScanMatcher, init: OrientedPoint, pose: OrientedPoint
) -> float:
    gain = 1.0
    if matcher.angular_odometry_reliability > 0.0:
        dth = _wrap(init.theta - pose.theta)
        gain *= math.exp(-matcher.angular_odometry_reliability * dth * dth)
    if matcher.linear_odometry_reliability > 0.0:
        dx = init.x - pose.x
        dy = init.y - pose.y
        gain *= math.exp(-matcher.linear_odometry_reliability * (dx * dx + dy * dy))
    return gain


def _climb(
    matcher: ScanMatcher,
    init: OrientedPoint,
    initial_score: float,
    evaluate: Callable[[OrientedPoint], float],
) -> SearchResult:
    """Greedy search over single-step moves, halving the steps when stuck."""
    best_score = -1.0
    current_pose = init
    current_score = initial_score
    adelta = matcher.opt_angular_delta
    ldelta = matcher.opt_linear_delta
    refinement = 0
    while True:
        if best_score >= current_score:
            refinement += 1
            adelta *= 0.5
            ldelta *= 0.5
        best_score = current_score
        best_local = current_pose
        for local_pose in _neighbours(current_pose, ldelta, adelta):
            local_score = evaluate(local_pose)
            if local_score > current_score:
                current_score = local_score
                best_local = local_pose
        current_pose = best_local
        if not (
            current_score > best_score or refinement < matcher.opt_recursive_iterations
        ):
            break
    return SearchResult(current_pose, best_score)


def _covariance(
    moves: Iterable[ScoredMove], mean: OrientedPoint, total: float
) -> Covariance3:
    xx = yy = tt = xy = xt = yt = 0.0
    for move in moves:
        w = move.likelihood
        dx = move.pose.x - mean.x
        dy = move.pose.y - mean.y
        dt = _wrap(move.pose.theta - mean.theta)
        xx += dx * dx * w
        yy += dy * dy * w
        tt += dt * dt * w
        xy += dx * dy * w
        xt += dx * dt * w
        yt += dy * dt * w
    return Covariance3(
        xx / total, yy / total, tt / total, xy / total, xt / total, yt / total
    )


def optimize(
    matcher: ScanMatcher,
    grid: GridMap,
    init: OrientedPoint,
    readings: Sequence[float],
) -> SearchResult:
    """Hill-climb from ``init`` to the pose of locally highest score."""
    initial = matcher.score(grid, init, readings)
    return _climb(
        matcher,
        init,
        initial,
        lambda pose: _odometry_gain(matcher, init, pose)
        * matcher.score(grid, pose, readings),
    )


def optimize_with_covariance(
    matcher: ScanMatcher,
    grid: GridMap,
    init: OrientedPoint,
    readings: Sequence[float],
) -> CovarianceSearchResult:
    """Hill-climb as :func:`optimize` and estimate a covariance from the poses tried."""
    moves: List[ScoredMove] = []

    def evaluate(pose: OrientedPoint) -> float:
        result = matcher.likelihood_and_score(grid, pose, readings)
        moves.append(ScoredMove(pose, result.score, result.likelihood))
        return result.score

    initial = evaluate(init)
    pose, best_score = _climb(matcher, init, initial, evaluate)

    lmax = max(-1e9, max(m.likelihood for m in moves))
    for move in moves:
        move.likelihood = math.exp(move.likelihood - lmax)
    lacc = sum(m.likelihood for m in moves)
    mean = OrientedPoint(
        sum(m.pose.x * m.likelihood for m in moves) / lacc,
        sum(m.pose.y * m.likelihood for m in moves) / lacc,
        sum(m.pose.theta * m.likelihood for m in moves) / lacc,
    )
    return CovarianceSearchResult(pose, _covariance(moves, mean, lacc), best_score)


def icp_optimize(
    matcher: ScanMatcher,
    grid: GridMap,
    init: OrientedPoint,
    readings: Sequence[float],
) -> SearchResult:
    """Repeat alignment steps while they raise the score."""
    sc = matcher.score(grid, init, readings)
    start = init
    new_pose = init
    iterations = 0
    while True:
        current_score = sc
        step = matcher.icp_step(grid, start, readings)
        new_pose, sc = step.pose, step.score
        start = new_pose
        iterations += 1
        if not sc > current_score:
            break
    log.debug("icp optimisation took %d iterations", iterations)
    return SearchResult(new_pose, current_score)


def _steps(extent: float, step: float) -> Iterator[float]:
    if step <= 0:
        raise ValueError("sampling step must be positive")
    v = -extent
    while v <= extent:
        yield v
        v += step


def _sample_moves(
    matcher: ScanMatcher,
    grid: GridMap,
    pose: OrientedPoint,
    readings: Sequence[float],
    extra: Callable[[OrientedPoint], float],
) -> List[ScoredMove]:
    moves: List[ScoredMove] = []
    for xx in _steps(matcher.llsamplerange, matcher.llsamplestep):
        for yy in _steps(matcher.llsamplerange, matcher.llsamplestep):
            for tt in _steps(matcher.lasamplerange, matcher.lasamplestep):
                rp = OrientedPoint(pose.x + xx, pose.y + yy, pose.theta + tt)
                result = matcher.likelihood_and_score(grid, rp, readings)
                l = result.likelihood + extra(rp)
                if math.isnan(l):
                    raise ValueError("likelihood of a sampled pose is not a number")
                moves.append(ScoredMove(rp, result.score, l))
    return moves


def _summarise(moves: List[ScoredMove], lmax: float) -> LikelihoodResult:
    for move in moves:
        lmax = max(lmax, move.likelihood)
    lcum = 0.0
    for move in moves:
        move.likelihood = math.exp(move.likelihood - lmax)
        lcum += move.likelihood
    mx = sum(m.pose.x * m.likelihood for m in moves) / lcum
    my = sum(m.pose.y * m.likelihood for m in moves) / lcum
    s = sum(m.likelihood * math.sin(m.pose.theta) for m in moves) / lcum
    c = sum(m.likelihood * math.cos(m.pose.theta) for m in moves) / lcum
    mean = OrientedPoint(mx, my, math.atan2(s, c))
    value = math.log(lcum) + lmax
    if math.isnan(value):
        raise ValueError("likelihood is not a number")
    return LikelihoodResult(value, lmax, mean, _covariance(moves, mean, lcum))


def likelihood(
    matcher: ScanMatcher,
    grid: GridMap,
    pose: OrientedPoint,
    readings: Sequence[float],
) -> LikelihoodResult:
    """Sum the scan likelihood over a small grid of poses around ``pose``."""
    moves = _sample_moves(matcher, grid, pose, readings, lambda _: 0.0)
    return _summarise(moves, -1e9)


def likelihood_with_odometry(
    matcher: ScanMatcher,
    grid: GridMap,
    pose: OrientedPoint,
    odometry: Gaussian3,
    readings: Sequence[float],
    gain: float = 180.0,
) -> LikelihoodResult:
    """As :func:`likelihood`, with the odometry log density divided by ``gain`` added."""
    moves = _sample_moves(
        matcher, grid, pose, readings, lambda rp: odometry.eval(rp) / gain
    )
    return _summarise(moves, -sys.float_info.max)