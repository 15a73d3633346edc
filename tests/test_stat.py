import math
import random

import pytest

from gridmatch.point import OrientedPoint
from gridmatch.stat import (
    Covariance3,
    EigenCovariance3,
    Gaussian3,
    compute_gaussian_from_samples,
    eval_log_gaussian,
    sample_gaussian,
)

SAMPLES_NUMBER = 10000


def _columns_orthonormal(vectors):
    for a in range(3):
        for b in range(3):
            dot = sum(vectors[i][a] * vectors[i][b] for i in range(3))
            if abs(dot - (1.0 if a == b else 0.0)) > 1e-9:
                return False
    return True


def test_sample_gaussian_zero_sigma():
    assert sample_gaussian(0.0, random.Random(1)) == 0.0


def test_sample_gaussian_statistics():
    rng = random.Random(42)
    draws = [sample_gaussian(2.0, rng) for _ in range(20000)]
    mean = sum(draws) / len(draws)
    var = sum((d - mean) ** 2 for d in draws) / len(draws)
    assert mean == pytest.approx(0.0, abs=0.1)
    assert math.sqrt(var) == pytest.approx(2.0, rel=0.05)


def test_sample_gaussian_reproducible():
    a = [sample_gaussian(1.0, random.Random(7)) for _ in range(3)]
    b = [sample_gaussian(1.0, random.Random(7)) for _ in range(3)]
    assert a == b


def test_eval_log_gaussian_at_zero():
    assert eval_log_gaussian(1.0, 0.0) == pytest.approx(-0.5 * math.log(2 * math.pi))


def test_eval_log_gaussian_floor():
    assert eval_log_gaussian(0.0, 0.3) == eval_log_gaussian(1e-4, 0.3)
    assert eval_log_gaussian(-5.0, 0.3) == eval_log_gaussian(1e-4, 0.3)


def test_covariance_add():
    a = Covariance3(1, 2, 3, 4, 5, 6)
    b = Covariance3(10, 20, 30, 40, 50, 60)
    assert a + b == Covariance3(11, 22, 33, 44, 55, 66)


def test_eigen_covariance_values():
    ecov = EigenCovariance3.from_covariance(Covariance3(1.0, 0.01, 0.01, 0, 0, 0))
    assert list(ecov.values) == pytest.approx([0.01, 0.01, 1.0])
    assert _columns_orthonormal(ecov.vectors)


def test_rotate_keeps_values():
    ecov = EigenCovariance3.from_covariance(Covariance3(1.0, 0.01, 0.01, 0, 0, 0))
    rcov = ecov.rotate(math.pi / 4)
    assert rcov.values == ecov.values
    assert _columns_orthonormal(rcov.vectors)


def test_sampling_recovers_rotated_covariance():
    ecov = EigenCovariance3.from_covariance(Covariance3(1.0, 0.01, 0.01, 0, 0, 0))
    rcov = ecov.rotate(math.pi / 4)
    rng = random.Random(2024)
    points = [rcov.sample(rng) for _ in range(SAMPLES_NUMBER)]
    gaussian = compute_gaussian_from_samples(points)
    values = sorted(gaussian.covariance.values)
    assert values[0] == pytest.approx(0.01, rel=0.1)
    assert values[1] == pytest.approx(0.01, rel=0.1)
    assert values[2] == pytest.approx(1.0, rel=0.05)
    assert gaussian.cov.xx == pytest.approx(0.505, abs=0.03)
    assert gaussian.cov.yy == pytest.approx(0.505, abs=0.03)
    assert gaussian.cov.xy == pytest.approx(0.495, abs=0.03)
    again = Gaussian3.from_samples(points)
    assert again == gaussian


def test_weighted_mean_and_covariance():
    poses = [OrientedPoint(1, 0, 0), OrientedPoint(3, 0, 0)]
    g = Gaussian3.from_samples(poses, [1.0, 1.0])
    assert g.mean.x == pytest.approx(2.0)
    assert g.mean.theta == pytest.approx(0.0)
    assert g.cov.xx == pytest.approx(1.0)
    assert g.cov.yy == pytest.approx(0.0)


def test_unweighted_divides_by_count_plus_one():
    poses = [OrientedPoint(2, 4, 0), OrientedPoint(2, 4, 0)]
    g = Gaussian3.from_samples(poses)
    assert g.mean.x == pytest.approx(4.0 / 3.0)
    assert g.mean.y == pytest.approx(8.0 / 3.0)


def test_weights_length_mismatch():
    with pytest.raises(ValueError):
        Gaussian3.from_samples([OrientedPoint(1, 1, 0)], [1.0, 2.0])


def test_zero_weights_rejected():
    with pytest.raises(ValueError):
        Gaussian3.from_samples([OrientedPoint(1, 1, 0)], [0.0])


def test_gaussian_eval_peak_at_mean():
    cov = Covariance3(1.0, 1.0, 1.0)
    g = Gaussian3(OrientedPoint(1, 2, 0.5), EigenCovariance3.from_covariance(cov), cov)
    at_mean = g.eval(OrientedPoint(1, 2, 0.5))
    assert at_mean == pytest.approx(-1.5 * math.log(2 * math.pi))
    assert g.eval(OrientedPoint(2, 2, 0.5)) < at_mean
    assert g.eval(OrientedPoint(1, 2, 0.5 + 2 * math.pi)) == pytest.approx(at_mean)