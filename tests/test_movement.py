import math

import pytest

from gridmatch.movement import FSRMovement, frame_transformation
from gridmatch.point import OrientedPoint


def assert_same_pose(a, b):
    assert a.x == pytest.approx(b.x, abs=1e-9)
    assert a.y == pytest.approx(b.y, abs=1e-9)
    assert math.cos(a.theta) == pytest.approx(math.cos(b.theta), abs=1e-9)
    assert math.sin(a.theta) == pytest.approx(math.sin(b.theta), abs=1e-9)


def test_between_then_move_reaches_target():
    p1 = OrientedPoint(1.0, -2.0, 0.8)
    p2 = OrientedPoint(-3.0, 0.5, -2.5)
    assert_same_pose(FSRMovement.between(p1, p2).move(p1), p2)


def test_move_result_is_normalized():
    moved = FSRMovement(1.0, 0.0, 3.0).move(OrientedPoint(0.0, 0.0, 3.0))
    assert -math.pi <= moved.theta < math.pi


def test_forward_motion_follows_heading():
    start = OrientedPoint(0.0, 0.0, math.pi / 2)
    moved = FSRMovement(2.0, 0.0, 0.0).move(start)
    assert moved.x == pytest.approx(0.0, abs=1e-12)
    assert moved.y == pytest.approx(2.0)


def test_composed_with_inverse_is_identity():
    m = FSRMovement(1.5, -0.7, 2.2)
    ident = m.composed(m.inverted())
    assert ident.f == pytest.approx(0.0, abs=1e-12)
    assert ident.s == pytest.approx(0.0, abs=1e-12)
    assert ident.r == pytest.approx(0.0, abs=1e-12)


def test_composition_matches_sequential_moves():
    m1 = FSRMovement(1.0, 0.5, 0.3)
    m2 = FSRMovement(-0.2, 2.0, -1.4)
    start = OrientedPoint(0.5, 0.5, 1.0)
    assert_same_pose(m1.composed(m2).move(start), m2.move(m1.move(start)))


def test_normalized_rotation_range():
    for r in (-9.0, -math.pi, 0.0, math.pi, 12.0):
        m = FSRMovement(1.0, 2.0, r).normalized()
        assert -math.pi <= m.r < math.pi
        assert (m.f, m.s) == (1.0, 2.0)


def test_frame_transformation_same_frames_is_identity():
    ref = OrientedPoint(1.0, 2.0, 0.4)
    pt = OrientedPoint(-1.0, 3.0, -0.6)
    assert_same_pose(frame_transformation(ref, ref, pt), pt)


def test_frame_transformation_maps_reference_to_reference():
    ref1 = OrientedPoint(1.0, 2.0, 0.4)
    ref2 = OrientedPoint(-4.0, 0.5, 2.0)
    assert_same_pose(frame_transformation(ref1, ref2, ref1), ref2)