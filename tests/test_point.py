import math

import pytest

from gridmatch.point import (
    OrientedPoint,
    Point,
    absolute_difference,
    absolute_sum,
    euclidian_dist,
    interpolate,
    normalize_angle,
    point_max,
    point_min,
)


def test_add_then_subtract_round_trip():
    a, b = Point(1.5, -2.0), Point(0.25, 7.0)
    assert (a + b) - b == a


def test_scalar_multiplication_matches_repeated_addition():
    a = Point(1.5, -2.0)
    assert a * 2 == a + a
    assert 2 * a == a + a


def test_dot_product_of_point_with_itself_is_squared_norm():
    a = Point(3.0, 4.0)
    assert a * a == pytest.approx(math.hypot(a.x, a.y) ** 2)


def test_oriented_arithmetic_keeps_heading():
    a = OrientedPoint(1.0, 2.0, 0.5)
    b = OrientedPoint(-1.0, 0.5, 0.25)
    total = a + b
    assert isinstance(total, OrientedPoint)
    assert total - b == a


def test_oriented_plus_point_gives_plain_point():
    a = OrientedPoint(1.0, 2.0, 0.5)
    result = a + Point(1.0, 1.0)
    assert type(result) is Point
    assert result == Point(a.x + 1.0, a.y + 1.0)


def test_oriented_scaling_scales_heading():
    a = OrientedPoint(1.0, 2.0, 0.5)
    assert a * 2.0 == a + a
    assert 2.0 * a == a + a


def test_normalize_angle_range():
    for theta in (-10.0, -math.pi, -1.0, 0.0, 3.0, math.pi, 7.5, 100.0):
        result = normalize_angle(theta)
        assert -math.pi <= result < math.pi
        assert math.cos(result) == pytest.approx(math.cos(theta))
        assert math.sin(result) == pytest.approx(math.sin(theta), abs=1e-9)


def test_normalize_angle_pi_maps_to_minus_pi():
    assert normalize_angle(math.pi) == pytest.approx(-math.pi)


def test_normalized_keeps_position():
    p = OrientedPoint(1.0, 2.0, 9.0).normalized()
    assert (p.x, p.y) == (1.0, 2.0)
    assert -math.pi <= p.theta < math.pi


def test_rotate_preserves_distance_from_origin():
    p = OrientedPoint(3.0, -1.0, 0.2)
    r = p.rotate(1.1)
    assert math.hypot(r.x, r.y) == pytest.approx(math.hypot(p.x, p.y))
    assert r.theta == pytest.approx(1.3)


def test_position_drops_heading():
    p = OrientedPoint(3.0, -1.0, 0.2)
    assert p.position() == Point(3.0, -1.0)


def test_absolute_sum_inverts_absolute_difference():
    p1 = OrientedPoint(2.0, -1.0, 0.7)
    p2 = OrientedPoint(-0.5, 3.0, -2.0)
    back = absolute_sum(p2, absolute_difference(p1, p2))
    assert back.x == pytest.approx(p1.x)
    assert back.y == pytest.approx(p1.y)
    assert math.cos(back.theta) == pytest.approx(math.cos(p1.theta))
    assert math.sin(back.theta) == pytest.approx(math.sin(p1.theta))


def test_absolute_sum_with_plain_point():
    frame = OrientedPoint(1.0, 1.0, math.pi / 2)
    result = absolute_sum(frame, Point(1.0, 0.0))
    assert type(result) is Point
    assert result.x == pytest.approx(1.0)
    assert result.y == pytest.approx(2.0)


def test_point_max_and_min_bound_inputs():
    a, b = Point(1.0, 5.0), Point(3.0, -2.0)
    hi, lo = point_max(a, b), point_min(a, b)
    assert hi == Point(b.x, a.y)
    assert lo == Point(a.x, b.y)


def test_interpolate_points_hits_endpoints():
    a, b = Point(0.0, 1.0), Point(4.0, -3.0)
    assert interpolate(a, 1.0, b, 3.0, 1.0) == a
    assert interpolate(a, 1.0, b, 3.0, 3.0) == b


def test_interpolate_oriented_at_start_returns_start():
    a = OrientedPoint(0.0, 1.0, 0.4)
    b = OrientedPoint(4.0, -3.0, -1.0)
    result = interpolate(a, 0.0, b, 2.0, 0.0)
    assert result.x == pytest.approx(a.x)
    assert result.y == pytest.approx(a.y)
    assert result.theta == pytest.approx(a.theta)


def test_euclidian_dist_is_symmetric_and_ignores_heading():
    a = OrientedPoint(0.0, 0.0, 1.0)
    b = Point(3.0, 4.0)
    assert euclidian_dist(a, b) == euclidian_dist(b, a)
    assert euclidian_dist(a, b) == pytest.approx(math.sqrt((b - a) * (b - a)))