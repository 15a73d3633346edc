from gridmatch.point import OrientedPoint
from gridmatch.sensor import (
    OdometryReading,
    OdometrySensor,
    Sensor,
    SensorReading,
)


def test_sensor_default_name_is_empty():
    assert Sensor().name == ""


def test_sensor_name_can_be_changed():
    sensor = Sensor("FLASER")
    sensor.name = "RLASER"
    assert sensor.name == "RLASER"


def test_reading_defaults():
    reading = SensorReading()
    assert reading.sensor is None
    assert reading.time == 0.0


def test_reading_keeps_sensor_and_time():
    sensor = Sensor("odo")
    reading = SensorReading(sensor, 12.5)
    assert reading.sensor is sensor
    assert reading.time == 12.5
    reading.time = 13.0
    assert reading.time == 13.0


def test_odometry_sensor_ideal_flag():
    assert OdometrySensor("ODOM").ideal is False
    assert OdometrySensor("ODOM", ideal=True).ideal is True
    assert OdometrySensor("ODOM").name == "ODOM"


def test_odometry_reading_defaults_to_zero_poses():
    odo = OdometrySensor("ODOM")
    reading = OdometryReading(odo, 3.0)
    assert reading.sensor is odo
    assert reading.time == 3.0
    assert reading.pose == OrientedPoint(0.0, 0.0, 0.0)
    assert reading.speed == OrientedPoint(0.0, 0.0, 0.0)
    assert reading.acceleration == OrientedPoint(0.0, 0.0, 0.0)


def test_odometry_reading_pose_round_trip():
    reading = OdometryReading(OdometrySensor("ODOM"))
    pose = OrientedPoint(1.0, -2.0, 0.3)
    reading.pose = pose
    reading.speed = OrientedPoint(0.5, 0.0, 0.1)
    assert reading.pose == pose
    assert reading.speed.x == 0.5