"""Grid-based 2D laser scan matching with pose geometry, sensors and statistics helpers."""

__version__ = "0.1.0"