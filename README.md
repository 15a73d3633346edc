# gridmatch

A library for matching 2D laser scans against a grid of cells that collect
laser hits. It also holds the pose geometry and small statistics helpers that
scan matching uses. It is pure Python and has no dependencies outside the
standard library.

## Modules

- `gridmatch.point` has the frozen dataclasses `Point` and `OrientedPoint`.
  `Point * Point` gives the dot product and `Point * number` scales the point.
  `OrientedPoint` adds `normalized()`, `rotate(alpha)` and `position()`. The
  module also has these functions: `normalize_angle`, `absolute_difference`,
  `absolute_sum`, `point_max`, `point_min`, `interpolate` and `euclidian_dist`.
- `gridmatch.movement` has `FSRMovement`, a motion made of a forward part, a
  sideward part and a rotation. Its methods are `normalized()`, `inverted()`,
  `composed(other)`, `move(pose)` and `FSRMovement.between(pose1, pose2)`. The
  module also has `frame_transformation`.
- `gridmatch.eig3` has `eigen_decomposition(matrix)` for a real symmetric
  matrix. It returns an `Eigen(values, vectors)` tuple. The eigenvalues come in
  ascending order and the eigenvectors are the columns of `vectors`.
- `gridmatch.gridline` has `grid_line(start, end)` and `grid_line_core`. They
  list the integer cells along a segment, found with Bresenham's algorithm.
- `gridmatch.stat` has the following:
  - `sample_gaussian` and `eval_log_gaussian`.
  - `Covariance3`.
  - `EigenCovariance3`, with `from_covariance`, `rotate` and `sample`.
  - `Gaussian3`, with `eval` and `from_samples`.
  - `compute_gaussian_from_samples`.
- `gridmatch.smmap` has `PointAccumulator`, the hit and visit counts of one
  grid cell. Its methods are `update`, `mean`, `float(cell)` for occupancy
  (-1 means the cell was never visited), `add` and `entropy`. Cells that were
  never written share one object, returned by `PointAccumulator.unknown()`.
- `gridmatch.icp` has `icp_step` and `icp_nonlinear_step`. Each does a
  closed-form alignment of `(source, target)` point pairs and returns an
  `IcpResult(transform, error)`. `generate_random_point_pairs` makes test data.
- `gridmatch.dmatrix` has `DMatrix`, a small dense matrix. It supports
  `from_rows`, `identity`, `det`, `inverse`, `transpose` and `+ - *`. Its
  errors all derive from `MatrixError`:
  - `NotInvertibleMatrixError`
  - `IncompatibleMatrixError`
  - `NotSquareMatrixError`
- `gridmatch.datasmoother` has `DataSmoother`, which smooths weighted 1D
  samples with a Parzen window. It offers:
  - numeric integration;
  - sampling;
  - fitting a Gaussian;
  - Cramér–von Mises and KL distances to a Gaussian;
  - text dumps.
- `gridmatch.boundingbox` has `OrientedBoundingBox`, a box aligned to the
  principal axes of a point set, with an `area()` method. Its constructor raises
  `ValueError` when the points are empty or the eigenvectors cannot be
  computed.
- `gridmatch.pgm` has `write_pgm(stream, xsize, ysize, matrix)`. It writes a
  grid of values to a binary stream as a P5 image. A value of 0 becomes white
  and a value of 1 becomes black.
- `gridmatch.sensor` has `Sensor`, `SensorReading`, `OdometrySensor` and
  `OdometryReading`.
- `gridmatch.rangesensor` has `Beam`, `RangeSensor` and `RangeReading`:
  - `RangeSensor.uniform(...)` builds an evenly spaced scanner.
  - `RangeReading` has `raw_view(density)`, `active_beams(density)` and
    `cartesian_form(max_range)`.
- `gridmatch.scanmatcher` has `GridMap` and `ScanMatcher`:
  - `GridMap` is a grid of `PointAccumulator` cells. A cell is created the
    first time it is written. The grid can be resized.
  - `ScanMatcher` has `score`, `likelihood_and_score`, `icp_step`,
    `register_scan` and `compute_active_area`.
  - The matcher's settings are plain dataclass fields. Set them directly or
    through `set_laser_parameters` and `set_matching_parameters`.
- `gridmatch.search` does pose searches on top of a matcher and a grid:
  - `optimize` is a hill-climbing search.
  - `optimize_with_covariance` also estimates the spread of the poses it tried.
  - `icp_optimize` repeats alignment steps.
  - `likelihood` and `likelihood_with_odometry` sum the scan likelihood over a
    small lattice of poses.

## Example

```python
from gridmatch.point import OrientedPoint, Point, absolute_difference, absolute_sum
from gridmatch.gridline import grid_line
from gridmatch.scanmatcher import GridMap, ScanMatcher
from gridmatch.search import optimize

a = OrientedPoint(1.0, 2.0, 0.5)
b = OrientedPoint(3.0, 1.0, -0.2)
delta = absolute_difference(b, a)          # b seen from a
assert abs(absolute_sum(a, delta).x - b.x) < 1e-9

cells = grid_line(Point(0, 0), Point(4, 2))

grid = GridMap(Point(0.0, 0.0), 20.0, 20.0, 0.1)
matcher = ScanMatcher(kernel_size=1)
angles = [-0.9 + 0.01 * i for i in range(181)]
matcher.set_laser_parameters(angles, OrientedPoint())
readings = [5.0] * len(angles)

matcher.register_scan(grid, OrientedPoint(), readings)
result = optimize(matcher, grid, OrientedPoint(0.05, 0.0, 0.0), readings)
print(result.pose, result.score)
```

Some functions draw random numbers: `sample_gaussian`, `EigenCovariance3.sample`
and `generate_random_point_pairs`. Each takes an optional `random.Random`, and
without one it uses the `random` module's global generator. `DataSmoother`
takes its generator when it is constructed. Pass a seeded generator to make the
results reproducible.

## What it does not do

This is a library only. It does not:

- provide a command-line program;
- read or write robot log files;
- drive a full mapping loop over a stream of scans.

Reading scans from a file, keeping the robot's pose up to date and deciding
when to register a scan are left to the calling code. `GridMap` lives in memory
and is not saved anywhere. `write_pgm` is the only export.

## Tests

```
pip install -e .[test]
pytest
```