"""Relative motions expressed as forward, sideward and rotational components."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .point import OrientedPoint, normalize_angle

__all__ = ["FSRMovement", "frame_transformation"]


@dataclass(frozen=True)
class FSRMovement:
    """A motion: ``f`` forward, ``s`` sideward, then rotation by ``r``."""

    f: float = 0.0
    s: float = 0.0
    r: float = 0.0

    def normalized(self) -> FSRMovement:
        """The same motion with its rotation brought into [-pi, pi)."""
        return FSRMovement(self.f, self.s, normalize_angle(self.r))

    def inverted(self) -> FSRMovement:
        """The motion that undoes this one."""
        c, s = math.cos(self.r), math.sin(self.r)
        return FSRMovement(
            -c * self.f - s * self.s,
            s * self.f - c * self.s,
            -self.r,
        ).normalized()

    def composed(self, other: FSRMovement) -> FSRMovement:
        """This motion followed by ``other``."""
        c, s = math.cos(self.r), math.sin(self.r)
        return FSRMovement(
            c * other.f - s * other.s + self.f,
            s * other.f + c * other.s + self.s,
            self.r + other.r,
        ).normalized()

    def move(self, pt: OrientedPoint) -> OrientedPoint:
        """Apply the motion to a pose."""
        c, s = math.cos(pt.theta), math.sin(pt.theta)
        return OrientedPoint(
            pt.x + self.f * c - self.s * s,
            pt.y + self.f * s + self.s * c,
            self.r + pt.theta,
        ).normalized()

    @classmethod
    def between(cls, pt1: OrientedPoint, pt2: OrientedPoint) -> FSRMovement:
        """The motion that takes pose ``pt1`` to pose ``pt2``."""
        c, s = math.cos(pt1.theta), math.sin(pt1.theta)
        dx, dy = pt2.x - pt1.x, pt2.y - pt1.y
        return cls(dy * s + dx * c, dy * c - dx * s, pt2.theta - pt1.theta).normalized()


def frame_transformation(
    reference_frame1: OrientedPoint,
    reference_frame2: OrientedPoint,
    pt: OrientedPoint,
) -> OrientedPoint:
    """Map ``pt`` from frame 1 to frame 2, given one pose known in both frames."""
    zero = OrientedPoint()
    inverse_ref1 = FSRMovement.between(zero, reference_frame1).inverted()
    to_ref2 = FSRMovement.between(zero, reference_frame2)
    to_pt = FSRMovement.between(zero, pt)
    return to_ref2.composed(inverse_ref1).composed(to_pt).move(zero)