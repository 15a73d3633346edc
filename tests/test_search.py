import math

import pytest

from gridmatch.point import OrientedPoint, Point
from gridmatch.scanmatcher import GridMap, ScanMatcher
from gridmatch.search import (
    ScoredMove,
    icp_optimize,
    likelihood,
    likelihood_with_odometry,
    optimize,
    optimize_with_covariance,
)
from gridmatch.stat import EigenCovariance3, Gaussian3

ANGLES = [-0.5 + 0.1 * i for i in range(11)]
READINGS = [3.0] * len(ANGLES)


def _matcher():
    matcher = ScanMatcher()
    matcher.set_laser_parameters(ANGLES, OrientedPoint())
    return matcher


def _empty_grid():
    return GridMap(Point(0.0, 0.0), 20.0, 20.0, 0.1)


def _mapped():
    matcher = _matcher()
    grid = _empty_grid()
    matcher.register_scan(grid, OrientedPoint(), READINGS)
    return matcher, grid


def test_scored_move_holds_values():
    move = ScoredMove(OrientedPoint(1.0, 2.0, 0.5), 3.0, -1.0)
    assert move.pose == OrientedPoint(1.0, 2.0, 0.5)
    assert move.score == 3.0
    assert move.likelihood == -1.0


def test_optimize_on_empty_grid_stays_put():
    matcher = _matcher()
    init = OrientedPoint(0.3, -0.2, 0.1)
    pose, score = optimize(matcher, _empty_grid(), init, READINGS)
    assert pose == init
    assert score == 0.0


def test_optimize_never_lowers_score():
    matcher, grid = _mapped()
    init = OrientedPoint(0.07, -0.04, 0.02)
    pose, score = optimize(matcher, grid, init, READINGS)
    assert score >= matcher.score(grid, init, READINGS)


def test_optimize_score_is_score_of_returned_pose():
    matcher, grid = _mapped()
    init = OrientedPoint(0.05, 0.03, -0.01)
    pose, score = optimize(matcher, grid, init, READINGS)
    assert score == pytest.approx(matcher.score(grid, pose, READINGS))


def test_optimize_from_registered_pose_scores_positive():
    matcher, grid = _mapped()
    pose, score = optimize(matcher, grid, OrientedPoint(), READINGS)
    assert score > 0.0
    assert score >= matcher.score(grid, OrientedPoint(), READINGS)


def test_strong_odometry_reliability_keeps_pose_near_init():
    matcher, grid = _mapped()
    matcher.linear_odometry_reliability = 1e9
    matcher.angular_odometry_reliability = 1e9
    init = OrientedPoint(0.05, 0.05, 0.02)
    pose, _ = optimize(matcher, grid, init, READINGS)
    assert pose == init


def test_optimize_with_covariance_on_empty_grid():
    matcher = _matcher()
    init = OrientedPoint(0.1, 0.2, 0.0)
    pose, cov, score = optimize_with_covariance(matcher, _empty_grid(), init, READINGS)
    assert pose == init
    assert score == 0.0
    assert cov.xx > 0.0
    assert cov.yy > 0.0
    assert cov.tt > 0.0


def test_optimize_with_covariance_improves_and_is_nonnegative():
    matcher, grid = _mapped()
    init = OrientedPoint(0.06, -0.03, 0.01)
    pose, cov, score = optimize_with_covariance(matcher, grid, init, READINGS)
    assert score >= matcher.likelihood_and_score(grid, init, READINGS).score
    assert score == pytest.approx(
        matcher.likelihood_and_score(grid, pose, READINGS).score
    )
    assert min(cov.xx, cov.yy, cov.tt) >= 0.0
    assert cov.xy * cov.xy <= cov.xx * cov.yy + 1e-12


def test_icp_optimize_keeps_pose_and_returns_initial_score():
    matcher, grid = _mapped()
    init = OrientedPoint(0.02, 0.01, 0.03)
    pose, score = icp_optimize(matcher, grid, init, READINGS)
    assert pose == init
    assert score == pytest.approx(matcher.score(grid, init, READINGS))


def test_likelihood_on_empty_grid_is_uniform():
    matcher = _matcher()
    grid = _empty_grid()
    pose = OrientedPoint(0.5, -0.5, 0.2)
    value, lmax, mean, cov = likelihood(matcher, grid, pose, READINGS)
    assert lmax == pytest.approx(
        matcher.likelihood_and_score(grid, pose, READINGS).likelihood
    )
    assert value - lmax == pytest.approx(math.log(27))
    assert mean.x == pytest.approx(pose.x)
    assert mean.y == pytest.approx(pose.y)
    assert mean.theta == pytest.approx(pose.theta)
    assert cov.xx == pytest.approx(cov.yy)


def test_likelihood_value_bounds():
    matcher, grid = _mapped()
    value, lmax, mean, cov = likelihood(matcher, grid, OrientedPoint(), READINGS)
    assert lmax <= value <= lmax + math.log(27) + 1e-12
    assert min(cov.xx, cov.yy, cov.tt) >= 0.0


def test_likelihood_rejects_nonpositive_step():
    matcher = _matcher()
    matcher.llsamplestep = 0.0
    with pytest.raises(ValueError):
        likelihood(matcher, _empty_grid(), OrientedPoint(), READINGS)


def _odometry(mean):
    return Gaussian3(mean=mean, covariance=EigenCovariance3(values=(0.01, 0.01, 0.01)))


def test_likelihood_with_odometry_large_gain_matches_plain():
    matcher, grid = _mapped()
    pose = OrientedPoint()
    plain = likelihood(matcher, grid, pose, READINGS)
    with_odo = likelihood_with_odometry(
        matcher, grid, pose, _odometry(pose), READINGS, 1e15
    )
    assert with_odo.value == pytest.approx(plain.value, abs=1e-6)
    assert with_odo.mean.x == pytest.approx(plain.mean.x, abs=1e-9)


def test_likelihood_with_odometry_pulls_mean_towards_odometry():
    matcher = _matcher()
    grid = _empty_grid()
    pose = OrientedPoint()
    result = likelihood_with_odometry(
        matcher, grid, pose, _odometry(OrientedPoint(1.0, 0.0, 0.0)), READINGS, 1.0
    )
    assert result.mean.x > 0.0
    assert result.mean.y == pytest.approx(0.0, abs=1e-9)


def test_likelihood_with_odometry_nan_raises():
    matcher = _matcher()
    with pytest.raises(ValueError):
        likelihood_with_odometry(
            matcher,
            _empty_grid(),
            OrientedPoint(),
            _odometry(OrientedPoint(float("nan"), 0.0, 0.0)),
            READINGS,
        )