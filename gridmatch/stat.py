"""Gaussian sampling and three-dimensional pose Gaussians."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

from .eig3 import eigen_decomposition
from .point import OrientedPoint

__all__ = [
    "sample_gaussian",
    "eval_log_gaussian",
    "Covariance3",
    "EigenCovariance3",
    "Gaussian3",
    "compute_gaussian_from_samples",
]

_MIN_SIGMA_SQUARE = 1e-4

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]


def sample_gaussian(sigma: float, rng: Optional[random.Random] = None) -> float:
    """Draw from a zero-mean normal distribution with standard deviation ``sigma``.

    Uses the polar form of the Box-Muller transform.  ``rng`` defaults to the
    module-level generator of :mod:`random`.
    """
    if sigma == 0:
        return 0.0
    draw = (rng if rng is not None else random).random
    while True:
        r = draw()
        while r == 0.0:
            r = draw()
        x1 = 2.0 * r - 1.0
        r = draw()
        while r == 0.0:
            r = draw()
        x2 = 2.0 * draw() - 1.0
        w = x1 * x1 + x2 * x2
        if 0.0 < w <= 1.0:
            break
    return sigma * x2 * math.sqrt(-2.0 * math.log(w) / w)


def eval_log_gaussian(sigma_square: float, delta: float) -> float:
    """Log density of a zero-mean normal with variance ``sigma_square`` at ``delta``.

    Non-positive variances are replaced by a small floor.
    """
    if sigma_square <= 0:
        sigma_square = _MIN_SIGMA_SQUARE
    return -0.5 * delta * delta / sigma_square - 0.5 * math.log(
        2 * math.pi * sigma_square
    )


@dataclass(frozen=True)
class Covariance3:
    """Symmetric covariance of a pose (x, y, theta)."""

    xx: float = 0.0
    yy: float = 0.0
    tt: float = 0.0
    xy: float = 0.0
    xt: float = 0.0
    yt: float = 0.0

    def __add__(self, other: object) -> Covariance3:
        if not isinstance(other, Covariance3):
            return NotImplemented
        return Covariance3(
            self.xx + other.xx,
            self.yy + other.yy,
            self.tt + other.tt,
            self.xy + other.xy,
            self.xt + other.xt,
            self.yt + other.yt,
        )


def _identity3() -> Matrix3:
    return ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


@dataclass(frozen=True)
class EigenCovariance3:
    """A pose covariance in eigen form: eigenvalues and eigenvector columns."""

    values: Vector3 = (0.0, 0.0, 0.0)
    vectors: Matrix3 = field(default_factory=_identity3)

    @classmethod
    def from_covariance(cls, cov: Covariance3) -> EigenCovariance3:
        """Decompose a covariance; eigenvalues come in ascending order."""
        matrix = [
            [cov.xx, cov.xy, cov.xt],
            [cov.xy, cov.yy, cov.yt],
            [cov.xt, cov.yt, cov.tt],
        ]
        values, vectors = eigen_decomposition(matrix)
        return cls(tuple(values), tuple(tuple(row) for row in vectors))

    def rotate(self, angle: float) -> EigenCovariance3:
        """Rotate the eigenvectors about the theta axis by ``angle``."""
        c, s = math.cos(angle), math.sin(angle)
        rotation = ((c, -s, 0.0), (s, c, 0.0), (0.0, 0.0, 1.0))
        vectors = tuple(
            tuple(
                sum(rotation[i][k] * self.vectors[k][j] for k in range(3))
                for j in range(3)
            )
            for i in range(3)
        )
        return EigenCovariance3(self.values, vectors)

    def sample(self, rng: Optional[random.Random] = None) -> OrientedPoint:
        """Draw a zero-mean pose perturbation with this covariance."""
        noise = []
        for value in self.values:
            v = sample_gaussian(math.sqrt(value), rng) if value >= 0 else 0.0
            noise.append(0.0 if math.isnan(v) else v)
        x, y, theta = (
            sum(self.vectors[i][j] * noise[j] for j in range(3)) for i in range(3)
        )
        return OrientedPoint(x, y, math.atan2(math.sin(theta), math.cos(theta)))


@dataclass(frozen=True)
class Gaussian3:
    """A Gaussian over planar poses."""

    mean: OrientedPoint = field(default_factory=OrientedPoint)
    covariance: EigenCovariance3 = field(default_factory=EigenCovariance3)
    cov: Covariance3 = field(default_factory=Covariance3)

    def eval(self, pose: OrientedPoint) -> float:
        """Log density of the Gaussian at ``pose``."""
        dtheta = pose.theta - self.mean.theta
        q = (
            pose.x - self.mean.x,
            pose.y - self.mean.y,
            math.atan2(math.sin(dtheta), math.cos(dtheta)),
        )
        evec = self.covariance.vectors
        return sum(
            eval_log_gaussian(
                self.covariance.values[j], sum(evec[i][j] * q[i] for i in range(3))
            )
            for j in range(3)
        )

    @classmethod
    def from_samples(
        cls,
        poses: Iterable[OrientedPoint],
        weights: Optional[Iterable[float]] = None,
    ) -> Gaussian3:
        """Estimate a Gaussian from poses.

        With weights, sums are divided by the total weight.  Without weights
        every pose counts once and sums are divided by ``len(poses) + 1``.
        """
        poses = list(poses)
        if weights is None:
            weight_list: Sequence[float] = [1.0] * len(poses)
            wcum = 1.0 + len(poses)
        else:
            weight_list = list(weights)
            if len(weight_list) != len(poses):
                raise ValueError("poses and weights differ in length")
            wcum = sum(weight_list)
            if wcum == 0:
                raise ValueError("weights sum to zero")

        s = c = mx = my = 0.0
        for p, w in zip(poses, weight_list):
            s += w * math.sin(p.theta)
            c += w * math.cos(p.theta)
            mx += w * p.x
            my += w * p.y
        mean = OrientedPoint(mx / wcum, my / wcum, math.atan2(s / wcum, c / wcum))

        xx = yy = tt = xy = yt = xt = 0.0
        for p, w in zip(poses, weight_list):
            dx = p.x - mean.x
            dy = p.y - mean.y
            dt = p.theta - mean.theta
            dt = math.atan2(math.sin(dt), math.cos(dt))
            xx += w * dx * dx
            yy += w * dy * dy
            tt += w * dt * dt
            xy += w * dx * dy
            yt += w * dy * dt
            xt += w * dx * dt
        cov = Covariance3(
            xx / wcum, yy / wcum, tt / wcum, xy / wcum, xt / wcum, yt / wcum
        )
        return cls(mean, EigenCovariance3.from_covariance(cov), cov)


def compute_gaussian_from_samples(
    poses: Iterable[OrientedPoint], weights: Optional[Iterable[float]] = None
) -> Gaussian3:
    """Estimate a pose Gaussian from (optionally weighted) samples."""
    return Gaussian3.from_samples(poses, weights)