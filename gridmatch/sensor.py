"""Sensors, their readings and odometry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .point import OrientedPoint

__all__ = [
    "Sensor",
    "SensorMap",
    "SensorReading",
    "OdometrySensor",
    "OdometryReading",
]


@dataclass
class Sensor:
    """A named sensor."""

    name: str = ""


SensorMap = Dict[str, Sensor]


@dataclass
class SensorReading:
    """A measurement taken by ``sensor`` at ``time``."""

    sensor: Optional[Sensor] = None
    time: float = 0.0


@dataclass
class OdometrySensor(Sensor):
    """A sensor reporting the robot's own motion; ``ideal`` marks noise-free odometry."""

    ideal: bool = False


@dataclass
class OdometryReading(SensorReading):
    """Pose, speed and acceleration reported by an odometry sensor."""

    sensor: Optional[OdometrySensor] = None
    pose: OrientedPoint = field(default_factory=OrientedPoint)
    speed: OrientedPoint = field(default_factory=OrientedPoint)
    acceleration: OrientedPoint = field(default_factory=OrientedPoint)