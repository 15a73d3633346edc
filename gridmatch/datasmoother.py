"""Parzen-window smoothing of weighted one-dimensional data."""

from __future__ import annotations

import math
import random
import sys
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, TextIO

from .stat import sample_gaussian

__all__ = ["DataPoint", "GaussApproximation", "DataSmoother", "gauss"]

_MAX_DOUBLE = sys.float_info.max


def gauss(x: float, mean: float, sigma: float) -> float:
    """Density of a normal distribution with ``mean`` and ``sigma`` at ``x``."""
    return 1.0 / (math.sqrt(2.0 * math.pi) * sigma) * math.exp(
        -0.5 * ((x - mean) / sigma) ** 2
    )


@dataclass
class DataPoint:
    """A sample position ``x`` with its weight ``y``."""

    x: float = 0.0
    y: float = 0.0


class GaussApproximation(NamedTuple):
    """Mean and standard deviation of a normal fitted to the smoothed data."""

    mean: float
    sigma: float


class DataSmoother:
    """Weighted samples smoothed with a Gaussian kernel of width ``parzen_window``."""

    def __init__(self, parzen_window: float, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.reset(parzen_window)

    def reset(self, parzen_window: float) -> None:
        """Drop all data and start again with a new kernel width."""
        self._data: List[DataPoint] = []
        self._cumulated: List[float] = []
        self._integral = -1.0
        self._window = parzen_window
        self._from = _MAX_DOUBLE
        self._to = -_MAX_DOUBLE
        self._last_step = 0.001

    @property
    def data(self) -> List[DataPoint]:
        """A copy of the stored samples."""
        return [DataPoint(d.x, d.y) for d in self._data]

    def _require_data(self) -> None:
        if not self._data:
            raise ValueError("the smoother holds no data")

    def _grid(self, step: float, stop: Optional[float] = None) -> Iterator[float]:
        if step <= 0:
            raise ValueError("step must be positive")
        end = self._to if stop is None else stop
        x = self._from
        while x <= end:
            yield x
            x += step

    def set_min_to_zero(self) -> None:
        """Shift all weights so that the smallest one becomes zero."""
        minval = min((d.y for d in self._data), default=_MAX_DOUBLE)
        for d in self._data:
            d.y -= minval
        self._cumulated = []

    def add(self, x: float, p: float) -> None:
        """Add a sample at ``x`` with weight ``p``."""
        self._data.append(DataPoint(x, p))
        self._integral = -1.0
        self._from = min(self._from, x - 3.0 * self._window)
        self._to = max(self._to, x + 3.0 * self._window)
        self._cumulated = []

    def integrate(self, step: float) -> float:
        """Integrate the smoothed data over its whole range and remember the result."""
        self._last_step = step
        self._integral = sum(self.smoothed_data(x) * step for x in self._grid(step))
        return self._integral

    def integral(self, step: float, x_to: float) -> float:
        """Integral of the smoothed data from the start of its range up to ``x_to``."""
        return sum(self.smoothed_data(x) * step for x in self._grid(step, x_to))

    def smoothed_data(self, x: float) -> float:
        """Value of the normalised smoothed density at ``x``."""
        self._require_data()
        p = 0.0
        sum_y = 0.0
        for d in self._data:
            dist = abs(x - d.x)
            p += d.y * math.exp(-0.5 * (dist / self._window) ** 2)
            sum_y += d.y
        denom = math.sqrt(2.0 * math.pi) * sum_y * self._window
        return p * (1.0 / denom)

    def sample_numeric(self, step: float) -> float:
        """Draw a position by walking the numerically integrated density."""
        self._require_data()
        if self._integral < 0 or step != self._last_step:
            self.integrate(step)
        r = self._rng.uniform(0.0, self._integral)
        total = 0.0
        for x in self._grid(step):
            total += self.smoothed_data(x) * step
            if total > r:
                return x - 0.5 * step
        return self._to

    def _compute_cumulated(self) -> None:
        self._require_data()
        total = 0.0
        self._cumulated = []
        for d in self._data:
            total += d.y
            self._cumulated.append(total)

    def sample(self) -> float:
        """Draw one position: pick a stored sample by weight and add kernel noise."""
        self._require_data()
        if not self._cumulated:
            self._compute_cumulated()
        r = self._rng.uniform(0.0, self._cumulated[-1])
        total = 0.0
        for d, cumulated in zip(self._data, self._cumulated):
            total += cumulated
            if total >= r:
                return d.x + sample_gaussian(self._window, self._rng)
        raise RuntimeError("sampling fell off the end of the data")

    def sample_multiple(self, num: int) -> List[float]:
        """Draw ``num`` positions in one sweep over the data."""
        self._require_data()
        if not self._cumulated:
            self._compute_cumulated()
        maxval = self._cumulated[-1]
        randoms = sorted(self._rng.uniform(0.0, maxval) for _ in range(num))
        samples: List[float] = []
        total = 0.0
        j = 0
        for d, cumulated in zip(self._data, self._cumulated):
            if j >= num:
                break
            total += cumulated
            while j < num and total >= randoms[j]:
                samples.append(d.x + sample_gaussian(self._window, self._rng))
                j += 1
        return samples

    def approx_gauss(self, step: float) -> GaussApproximation:
        """Fit a normal distribution to the smoothed density."""
        self._require_data()
        total = 0.0
        mean = 0.0
        for x in self._grid(step):
            d = self.smoothed_data(x)
            total += d
            mean += x * d
        mean /= total
        var = sum((x - mean) ** 2 * self.smoothed_data(x) for x in self._grid(step))
        var /= total
        return GaussApproximation(mean, math.sqrt(var))

    def cramer_von_mises_to_gauss(self, step: float, mean: float, sigma: float) -> float:
        """Cramér-von Mises distance between the smoothed data and a normal."""
        p = 0.0
        sint = 0.0
        gint = 0.0
        for x in self._grid(step):
            sint += self.smoothed_data(x) * step
            gint += gauss(x, mean, sigma) * step
            p += (sint - gint) ** 2
        return p

    def kld_to_gauss(self, step: float, mean: float, sigma: float) -> float:
        """Kullback-Leibler divergence of the smoothed data from a normal.

        Raises ValueError when the two densities' masses over the range differ
        by more than 0.1.
        """
        p = 0.0
        sd = 0.0
        sg = 0.0
        for x in self._grid(step):
            d = 1e-10 + self.smoothed_data(x)
            g = 1e-10 + gauss(x, mean, sigma)
            sd += d
            sg += g
            p += d * math.log(d / g)
        sd *= step
        sg *= step
        if abs(sd - sg) > 0.1:
            raise ValueError("densities have different mass over the range")
        return p * step

    def dump_data(self, stream: TextIO) -> None:
        """Write the stored samples as ``x y`` lines."""
        for d in self._data:
            stream.write("%f %f\n" % (d.x, d.y))

    def dump_smoothed_data(self, stream: TextIO, step: float) -> None:
        """Write the smoothed density over its range as ``x value`` lines."""
        for x in self._grid(step):
            stream.write("%f %f\n" % (x, self.smoothed_data(x)))